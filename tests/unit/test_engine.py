"""
Unit tests for the retrieval engine.

Tests for:
- Initialization state machine
- Document ingestion and re-upload behavior
- Query ranking and the no-documents result
- Maintenance operations
- Answer formatting
"""

import threading

import pytest

from docsearch.contracts.retrieval_contracts import (
    NO_DOCUMENTS_MESSAGE,
    ParsedDocument,
    RetrievalHit,
    RetrievalResult,
)
from docsearch.core.config import EngineConfig
from docsearch.core.exceptions import (
    ConfigError,
    EmptyContentError,
    NotInitializedError,
)
from docsearch.retrieval.answer import (
    ANSWER_FOOTER,
    ANSWER_HEADER,
    NO_MATCHES_MESSAGE,
    format_answer,
)
from docsearch.retrieval.engine import RetrievalEngine


class TestInitialization:
    """Tests for the Uninitialized -> Initialized transition."""

    def test_starts_uninitialized(self):
        engine = RetrievalEngine()
        assert engine.is_initialized is False
        assert engine.get_document_count() == 0

    def test_query_before_initialize(self):
        with pytest.raises(NotInitializedError, match="not initialized"):
            RetrievalEngine().query("anything")

    def test_clear_before_initialize(self):
        with pytest.raises(NotInitializedError):
            RetrievalEngine().clear_documents()

    def test_recover_after_not_initialized(self):
        """Test that initializing after the error makes query usable."""
        engine = RetrievalEngine()
        with pytest.raises(NotInitializedError):
            engine.query("question")

        engine.initialize()
        assert engine.query("question").no_documents is True

    def test_initialize_is_idempotent(self, engine):
        engine.add_document("a.txt", ["The cat sat."])
        engine.initialize()

        assert engine.is_initialized is True
        assert engine.get_document_count() == 1

    def test_add_document_initializes(self):
        engine = RetrievalEngine()
        engine.add_document("a.txt", ["The cat sat."])

        assert engine.is_initialized is True
        assert engine.get_document_count() == 1


class TestQuery:
    """Tests for query ranking."""

    def test_empty_store_sentinel(self, engine):
        """Test the no-documents result is returned instead of an error."""
        result = engine.query("What is this?")

        assert result.no_documents is True
        assert result.message == NO_DOCUMENTS_MESSAGE
        assert result.hits == []
        assert result.query_text == "What is this?"

    def test_relevant_chunk_ranks_first(self, engine):
        """Test a query about a cat prefers the cat passage to the weather one."""
        engine.add_document("a.txt", ["The cat sat.", "It was warm."])
        engine.add_document("weather.txt", ["Tomorrow's weather forecast predicts rain."])

        result = engine.query("cat")
        scores = {h.chunk_id: h.score for h in result.hits}

        assert result.hits[0].chunk_id == "a.txt_chunk_0"
        assert result.hits[0].text == "The cat sat."
        assert result.hits[0].document == "a.txt"
        assert scores["a.txt_chunk_0"] > scores["weather.txt_chunk_0"]

    def test_exact_passage_scores_one(self, engine):
        engine.add_document("a.txt", ["The cat sat.", "It was warm."])
        result = engine.query("the cat sat")

        assert result.hits[0].text == "The cat sat."
        assert abs(result.hits[0].score - 1.0) < 1e-9

    def test_returns_top_three(self, engine):
        engine.add_document("many.txt", [f"Passage number {i} about cats." for i in range(6)])
        result = engine.query("cats")

        assert len(result.hits) == 3
        assert [h.rank for h in result.hits] == [1, 2, 3]
        scores = [h.score for h in result.hits]
        assert scores == sorted(scores, reverse=True)
        assert result.total_candidates == 6

    def test_fewer_chunks_than_top_k(self, engine):
        engine.add_document("one.txt", ["Only passage."])
        assert len(engine.query("passage").hits) == 1

    def test_top_k_override(self, engine):
        engine.add_document("many.txt", ["Alpha one.", "Alpha two.", "Alpha three."])
        assert len(engine.query("alpha", top_k=1).hits) == 1

        with pytest.raises(ValueError, match="top_k must be positive"):
            engine.query("alpha", top_k=0)

    def test_configured_top_k(self):
        engine = RetrievalEngine(EngineConfig(top_k=2))
        engine.add_document("many.txt", ["Alpha one.", "Alpha two.", "Alpha three."])
        assert len(engine.query("alpha").hits) == 2

    def test_query_does_not_mutate_store(self, engine):
        engine.add_document("a.txt", ["The cat sat.", "It was warm."])
        before = engine.get_document_count()
        engine.query("cat")
        engine.query("")

        assert engine.get_document_count() == before

    def test_degenerate_query(self, engine):
        """Test an empty question scores every chunk at zero."""
        engine.add_document("a.txt", ["The cat sat.", "It was warm."])
        result = engine.query("?!")

        assert all(h.score == 0.0 for h in result.hits)

    def test_parallel_embedding_matches_sequential(self):
        chunks = [f"Sentence {i} mentions topic {i % 3}." for i in range(12)]
        sequential = RetrievalEngine()
        parallel = RetrievalEngine(EngineConfig(embed_workers=4))
        sequential.add_document("doc.txt", chunks)
        parallel.add_document("doc.txt", chunks)

        a = sequential.query("topic 1")
        b = parallel.query("topic 1")
        assert [(h.chunk_id, h.score) for h in a.hits] == [(h.chunk_id, h.score) for h in b.hits]


class TestReupload:
    """Tests for re-adding a document under the same name."""

    def test_overwrite_same_length(self, engine):
        engine.add_document("doc.txt", ["Version one text."])
        engine.add_document("doc.txt", ["Version two text."])

        assert engine.get_document_count() == 1
        assert engine.query("version").hits[0].text == "Version two text."

    def test_shrink_keeps_stale_chunks_by_default(self, engine):
        """Test chunks beyond the new length survive a shorter re-upload."""
        engine.add_document("doc.txt", ["First old.", "Second old.", "Third old."])
        engine.add_document("doc.txt", ["First new."])

        assert engine.get_document_count() == 3
        texts = {h.text for h in engine.query("old", top_k=3).hits}
        assert texts == {"First new.", "Second old.", "Third old."}

    def test_shrink_with_replace_on_reupload(self, replacing_engine):
        """Test replace mode drops every earlier chunk of the document."""
        replacing_engine.add_document("doc.txt", ["First old.", "Second old.", "Third old."])
        replacing_engine.add_document("doc.txt", ["First new."])

        assert replacing_engine.get_document_count() == 1
        assert replacing_engine.query("old").hits[0].text == "First new."

    def test_replace_leaves_other_documents(self, replacing_engine):
        replacing_engine.add_document("keep.txt", ["Keep me."])
        replacing_engine.add_document("doc.txt", ["One.", "Two."])
        replacing_engine.add_document("doc.txt", ["Three."])

        assert replacing_engine.get_document_count() == 2
        assert replacing_engine.list_documents() == ["doc.txt", "keep.txt"]


class TestIngestion:
    """Tests for ingesting full document text."""

    def test_ingest_document(self, engine):
        count = engine.ingest_document("a.txt", "The cat sat. It was warm.")

        assert count == 1
        assert engine.query("cat").hits[0].text == "The cat sat. It was warm."

    def test_ingest_uses_configured_chunk_size(self):
        engine = RetrievalEngine(EngineConfig(max_chunk_size=15))
        count = engine.ingest_document("a.txt", "The cat sat. It was warm.")

        assert count == 2
        assert engine.query("warm").hits[0].text == "It was warm."

    def test_ingest_empty_document(self, engine):
        with pytest.raises(EmptyContentError) as exc_info:
            engine.ingest_document("blank.txt", "   \n ")

        assert exc_info.value.document == "blank.txt"
        assert engine.get_document_count() == 0

    def test_batch_isolates_failures(self, engine):
        """Test one empty document does not stop the rest of a batch."""
        report = engine.ingest_documents([
            ("good.txt", "Some text."),
            ("empty.txt", "   "),
            ParsedDocument(file_name="b.md", content="More text here.", file_type=".md"),
        ])

        assert [o.document for o in report.succeeded] == ["good.txt", "b.md"]
        assert len(report.failed) == 1
        assert report.failed[0].document == "empty.txt"
        assert report.failed[0].error_type == "EmptyContentError"
        assert report.total_chunks == 2
        assert engine.get_document_count() == 2

    def test_batch_records_unexpected_errors(self, engine, monkeypatch):
        original_chunk = engine.chunker.chunk

        def flaky_chunk(content, source_id=None):
            if source_id == "bad.txt":
                raise RuntimeError("decoder exploded")
            return original_chunk(content, source_id=source_id)

        monkeypatch.setattr(engine.chunker, "chunk", flaky_chunk)
        report = engine.ingest_documents([("bad.txt", "Text."), ("ok.txt", "Text.")])

        assert report.failed[0].error_type == "RuntimeError"
        assert report.failed[0].error_message == "decoder exploded"
        assert [o.document for o in report.succeeded] == ["ok.txt"]
        assert engine.query("text").hits[0].text == "Text."

    def test_batch_records_malformed_items(self, engine):
        """Test a malformed batch item is reported without aborting the batch."""
        report = engine.ingest_documents([
            ("only-a-name.txt",),
            ("ok.txt", "Fine text."),
        ])

        assert [o.document for o in report.succeeded] == ["ok.txt"]
        assert len(report.failed) == 1
        assert report.failed[0].error_type == "ValueError"
        assert report.failed[0].content_sha256 is None
        assert engine.get_document_count() == 1

    def test_report_content_hash(self, engine):
        report = engine.ingest_documents([("a.txt", "Hello, World!")])
        assert report.outcomes[0].content_sha256 == (
            "dffd6021bb2bd5b0af676290809ec3a53191dd81c7f70a4b28688a362182986f"
        )

    def test_report_to_dict(self, engine):
        report = engine.ingest_documents([("a.txt", "Hi there."), ("b.txt", "")])
        data = report.to_dict()

        assert data["succeeded"] == 1
        assert data["failed"] == 1
        assert len(data["outcomes"]) == 2


class TestMaintenance:
    """Tests for clearing, removal and dimension changes."""

    def test_clear_documents(self, engine):
        engine.add_document("a.txt", ["The cat sat.", "It was warm."])
        engine.clear_documents()

        assert engine.get_document_count() == 0
        assert engine.list_documents() == []
        assert engine.query("cat").no_documents is True

    def test_add_after_clear(self, engine):
        engine.add_document("a.txt", ["The cat sat."])
        engine.clear_documents()
        engine.add_document("b.txt", ["A dog ran."])

        assert engine.query("dog").hits[0].text == "A dog ran."

    def test_remove_document(self, engine):
        engine.add_document("a.txt", ["The cat sat.", "It was warm."])
        engine.add_document("b.txt", ["A dog ran."])

        assert engine.remove_document("a.txt") == 2
        assert engine.get_document_count() == 1
        assert engine.list_documents() == ["b.txt"]
        assert engine.remove_document("missing.txt") == 0

    def test_remove_after_shrink_removes_stale(self, engine):
        engine.add_document("doc.txt", ["One.", "Two.", "Three."])
        engine.add_document("doc.txt", ["Uno."])

        assert engine.remove_document("doc.txt") == 3
        assert engine.get_document_count() == 0

    def test_count_is_chunk_level(self, engine):
        engine.add_document("a.txt", ["One.", "Two.", "Three."])
        assert engine.get_document_count() == 3
        assert engine.list_documents() == ["a.txt"]

    def test_set_dimension_clears_store(self, engine):
        engine.add_document("a.txt", ["The cat sat."])
        engine.set_dimension(64)

        assert engine.dimension == 64
        assert engine.get_document_count() == 0

        engine.add_document("a.txt", ["The cat sat."])
        result = engine.query("the cat sat")
        assert abs(result.hits[0].score - 1.0) < 1e-9

    def test_set_same_dimension_keeps_store(self, engine):
        engine.add_document("a.txt", ["The cat sat."])
        engine.set_dimension(512)
        assert engine.get_document_count() == 1

    def test_set_invalid_dimension(self, engine):
        with pytest.raises(ConfigError):
            engine.set_dimension(0)


class TestDimensionChangeDuringOperations:
    """Tests for set_dimension running on another thread mid-operation."""

    @staticmethod
    def _resize_on_thread(engine, dimension):
        worker = threading.Thread(target=engine.set_dimension, args=(dimension,))
        worker.start()
        worker.join(timeout=5)
        assert not worker.is_alive()

    def test_add_document_lands_in_new_store(self, engine, monkeypatch):
        old_embedder = engine._embedder
        original_embed_many = old_embedder.embed_many

        def resizing_embed_many(texts, max_workers=1):
            self._resize_on_thread(engine, 64)
            return original_embed_many(texts, max_workers=max_workers)

        monkeypatch.setattr(old_embedder, "embed_many", resizing_embed_many)

        assert engine.add_document("a.txt", ["The cat sat."]) == 1
        assert engine.dimension == 64
        assert engine.get_document_count() == 1
        assert engine.list_documents() == ["a.txt"]

        result = engine.query("the cat sat")
        assert abs(result.hits[0].score - 1.0) < 1e-9

    def test_query_scores_against_one_snapshot(self, engine, monkeypatch):
        engine.add_document("a.txt", ["The cat sat."])
        old_store = engine._store
        original_all_entries = old_store.all_entries

        def resizing_all_entries():
            self._resize_on_thread(engine, 64)
            return original_all_entries()

        monkeypatch.setattr(old_store, "all_entries", resizing_all_entries)

        result = engine.query("the cat sat")
        assert result.hits[0].text == "The cat sat."
        assert abs(result.hits[0].score - 1.0) < 1e-9

        assert engine.dimension == 64
        assert engine.get_document_count() == 0


class TestFormatAnswer:
    """Tests for rendering results."""

    def test_sentinel(self, engine):
        assert format_answer(engine.query("anything")) == NO_DOCUMENTS_MESSAGE

    def test_excerpts(self, engine):
        engine.add_document("a.txt", ["The cat sat.", "It was warm."])
        answer = format_answer(engine.query("the cat sat"))

        assert answer.startswith(ANSWER_HEADER + "\n\n#1 (score 1.000):\nThe cat sat.")
        assert "#2 (score " in answer
        assert answer.endswith("\n\n" + ANSWER_FOOTER)

    def test_no_hits(self):
        result = RetrievalResult(retrieval_id="r", query_text="q")
        assert format_answer(result) == NO_MATCHES_MESSAGE

    def test_hit_layout(self):
        result = RetrievalResult(
            retrieval_id="r",
            query_text="q",
            hits=[RetrievalHit(rank=1, score=0.5, chunk_id="d_chunk_0", text="Passage.")],
        )
        assert format_answer(result) == (
            f"{ANSWER_HEADER}\n\n#1 (score 0.500):\nPassage.\n\n{ANSWER_FOOTER}"
        )
