from __future__ import annotations

import unittest
from unittest.mock import MagicMock

from loguru import logger

from app.rag.embedding.base import IEmbeddingModel
from app.rag.fusion.rrf_fusion import RRFMergeImpl
from app.rag.mmr_aggregator import MmrAggregator, default_query_selector
from app.rag.models.candidate import Candidate
from app.rag.models.query import Query
from app.rag.strategies import GenerateEmbeddings, UseExistingEmbeddings


def fake_model(query_vector=(1.0, 0.0, 0.0), vectors=None) -> MagicMock:
    model = MagicMock(spec=IEmbeddingModel)
    model.embed.return_value = list(query_vector)
    if vectors is not None:
        model.embed_all.return_value = [list(v) for v in vectors]
    return model


class RecordingFusion(RRFMergeImpl):
    def __init__(self):
        super().__init__()
        self.calls = []

    def rrf_merge(self, candidate_lists, top_n=None, k=None):
        self.calls.append([[c.doc_id for c in lst] for lst in candidate_lists])
        return super().rrf_merge(candidate_lists, top_n=top_n, k=k)


class LogCaptureMixin:
    def capture_logs(self, level: str = "WARNING") -> list:
        messages: list = []
        handler_id = logger.add(lambda message: messages.append(str(message)), level=level)
        self.addCleanup(logger.remove, handler_id)
        return messages


class MmrAggregatorTestCase(LogCaptureMixin, unittest.TestCase):
    def setUp(self) -> None:
        self.query = Query("What is AI?")
        self.c1 = Candidate(doc_id="1", content="AI is artificial intelligence")
        self.c2 = Candidate(doc_id="2", content="Machine learning is a subset of AI")
        self.c3 = Candidate(doc_id="3", content="Deep learning uses neural networks")

    def test_auto_strategy_generates_embeddings(self) -> None:
        model = fake_model(vectors=[(0.9, 0.1, 0.0), (0.5, 0.5, 0.0), (0.1, 0.1, 0.8)])
        aggregator = MmrAggregator(embedding_model=model)

        result = aggregator.aggregate({self.query: [[self.c1, self.c2, self.c3]]})

        self.assertEqual(len(result), 3)
        self.assertEqual(result[0], self.c1)
        model.embed.assert_called_once_with("What is AI?")
        model.embed_all.assert_called_once()

    def test_max_results_selects_diverse_subset(self) -> None:
        model = fake_model(vectors=[(0.9, 0.1, 0.0), (0.85, 0.15, 0.0), (0.3, 0.0, 0.7)])
        aggregator = MmrAggregator(embedding_model=model, max_results=2, lambda_param=0.5)

        result = aggregator.aggregate({self.query: [[self.c1, self.c2, self.c3]]})

        self.assertEqual([c.doc_id for c in result], ["1", "3"])

    def test_results_are_plain_candidates(self) -> None:
        model = fake_model(vectors=[(0.9, 0.1, 0.0)])
        result = MmrAggregator(embedding_model=model).aggregate({self.query: [[self.c1]]})

        self.assertIsInstance(result[0], Candidate)
        self.assertEqual(result[0].content, self.c1.content)

    def test_small_pool_logs_warning(self) -> None:
        messages = self.capture_logs()
        model = fake_model(vectors=[(0.9, 0.1, 0.0), (0.8, 0.2, 0.0), (0.7, 0.3, 0.0)])
        aggregator = MmrAggregator(embedding_model=model, max_results=2)

        result = aggregator.aggregate({self.query: [[self.c1, self.c2, self.c3]]})

        self.assertEqual(len(result), 2)
        self.assertTrue(any("候选数量偏少" in m for m in messages))

    def test_min_score_filters_before_selection(self) -> None:
        model = fake_model(vectors=[(0.9, 0.1, 0.0), (0.7, 0.3, 0.0), (0.2, 0.8, 0.0)])
        aggregator = MmrAggregator(embedding_model=model, min_score=0.5)

        result = aggregator.aggregate({self.query: [[self.c1, self.c2, self.c3]]})

        self.assertEqual(result, [self.c1, self.c2])

    def test_invalid_parameters_rejected_at_construction(self) -> None:
        model = fake_model(vectors=[(0.9, 0.1, 0.0), (0.7, 0.3, 0.0)])
        for kwargs in (
            {"lambda_param": 1.5},
            {"lambda_param": -0.1},
            {"lambda_param": float("nan")},
            {"max_results": -1},
        ):
            with self.subTest(**kwargs):
                with self.assertRaises(ValueError):
                    MmrAggregator(embedding_model=model, **kwargs)

        model.embed.assert_not_called()
        model.embed_all.assert_not_called()

    def test_empty_inputs_return_empty_without_model_calls(self) -> None:
        cases = [
            {},
            {self.query: []},
            {self.query: [[]]},
            {self.query: [[], []]},
        ]
        for query_to_candidates in cases:
            with self.subTest(query_to_candidates=query_to_candidates):
                model = fake_model()
                result = MmrAggregator(embedding_model=model).aggregate(query_to_candidates)
                self.assertEqual(result, [])
                self.assertEqual(model.method_calls, [])

    def test_multiple_queries_need_selector(self) -> None:
        aggregator = MmrAggregator(embedding_model=fake_model())
        query_to_candidates = {Query("query 1"): [[]], Query("query 2"): [[]]}

        with self.assertRaises(ValueError) as ctx:
            aggregator.aggregate(query_to_candidates)
        self.assertIn("making MMR ambiguous", str(ctx.exception))
        self.assertIn("query_selector", str(ctx.exception))

    def test_custom_query_selector_fuses_all_queries(self) -> None:
        primary, secondary = Query("primary query"), Query("secondary query")
        model = fake_model(vectors=[(0.9, 0.1, 0.0), (0.8, 0.2, 0.0)])
        fusion = RecordingFusion()
        aggregator = MmrAggregator(
            embedding_model=model,
            fusion_service=fusion,
            query_selector=lambda q: next(iter(q)),
        )

        result = aggregator.aggregate({primary: [[self.c1]], secondary: [[self.c2]]})

        self.assertEqual(len(result), 2)
        model.embed.assert_called_once_with("primary query")
        # 先按查询融合两次，再跨查询融合一次
        self.assertEqual(fusion.calls, [[["1"]], [["2"]], [["1"], ["2"]]])

    def test_duplicate_documents_are_fused(self) -> None:
        model = fake_model(vectors=[(0.9, 0.1, 0.0), (0.8, 0.2, 0.0), (0.1, 0.1, 0.8)])
        aggregator = MmrAggregator(embedding_model=model)

        result = aggregator.aggregate(
            {self.query: [[self.c1, self.c2], [self.c2, self.c3]]}
        )

        self.assertEqual(len(result), 3)
        self.assertEqual(len({c.doc_id for c in result}), 3)
        self.assertEqual(model.embed_all.call_args[0][0][0], self.c2.content)

    def test_force_generation_ignores_existing_vectors(self) -> None:
        with_vector = Candidate(doc_id="1", content="content 1", embedding=(0.0, 1.0, 0.0))
        model = fake_model(vectors=[(0.9, 0.1, 0.0)])
        aggregator = MmrAggregator(embedding_model=model, force_embedding_generation=True)

        result = aggregator.aggregate({self.query: [[with_vector]]})

        self.assertEqual(result, [with_vector])
        model.embed_all.assert_called_once_with(["content 1"])

    def test_existing_vectors_avoid_model_calls(self) -> None:
        model = fake_model()
        query = Query("q", embedding=(1.0, 0.0, 0.0))
        candidates = [
            Candidate(doc_id="1", content="a", embedding=(0.9, 0.1, 0.0)),
            Candidate(doc_id="2", content="b", embedding=(0.0, 1.0, 0.0)),
        ]

        result = MmrAggregator(embedding_model=model).aggregate({query: [candidates]})

        self.assertEqual([c.doc_id for c in result], ["1", "2"])
        self.assertEqual(model.method_calls, [])

    def test_partial_vectors_use_hybrid(self) -> None:
        model = fake_model(vectors=[(0.0, 1.0, 0.0)])
        candidates = [
            Candidate(doc_id="1", content="a", embedding=(0.9, 0.1, 0.0)),
            Candidate(doc_id="2", content="b"),
        ]

        result = MmrAggregator(embedding_model=model).aggregate({self.query: [candidates]})

        self.assertEqual(len(result), 2)
        model.embed_all.assert_called_once_with(["b"])

    def test_manual_strategy_takes_precedence(self) -> None:
        messages = self.capture_logs()
        aggregator = MmrAggregator(
            force_embedding_generation=True, strategy=UseExistingEmbeddings()
        )
        query = Query("q", embedding=(1.0, 0.0))
        candidates = [Candidate(doc_id="1", content="a", embedding=(1.0, 0.0))]

        result = aggregator.aggregate({query: [candidates]})

        self.assertEqual([c.doc_id for c in result], ["1"])
        self.assertTrue(any("以手动策略为准" in m for m in messages))

    def test_manual_generate_strategy(self) -> None:
        model = fake_model(vectors=[(0.9, 0.1, 0.0), (0.8, 0.2, 0.0)])
        aggregator = MmrAggregator(embedding_model=model, strategy=GenerateEmbeddings())

        result = aggregator.aggregate({self.query: [[self.c1, self.c2]]})

        self.assertEqual(len(result), 2)

    def test_embedding_model_required_for_auto_mode(self) -> None:
        with self.assertRaises(ValueError):
            MmrAggregator()
        MmrAggregator(force_embedding_generation=True)

    def test_upstream_failure_propagates(self) -> None:
        model = fake_model()
        model.embed_all.side_effect = RuntimeError("embedding service unavailable")
        aggregator = MmrAggregator(embedding_model=model)

        with self.assertRaises(RuntimeError):
            aggregator.aggregate({self.query: [[self.c1, self.c2]]})


class DefaultQuerySelectorTestCase(unittest.TestCase):
    def test_single_query(self) -> None:
        query = Query("only")
        self.assertIs(default_query_selector({query: [[]]}), query)

    def test_blank_query_text_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Query("   ")


if __name__ == "__main__":
    unittest.main()
