"""Tests for specgate.lib.documents module."""

from unittest.mock import patch

import pytest

from specgate.lib.config import ProjectConfig
from specgate.lib.documents import (
    FeatureDocuments,
    FeatureNotFound,
    NamedText,
    read_dir,
    read_feature_documents,
    read_text,
)


class TestReadText:
    """Test read_text function."""

    def test_missing_file(self, tmp_path):
        assert read_text(tmp_path / "nope.md") is None

    def test_directory_is_not_a_document(self, tmp_path):
        assert read_text(tmp_path) is None

    def test_reads_utf8(self, tmp_path):
        path = tmp_path / "spec.md"
        path.write_bytes("Café ✓\n".encode("utf-8"))
        assert read_text(path) == "Café ✓\n"

    def test_invalid_bytes_replaced(self, tmp_path):
        path = tmp_path / "spec.md"
        path.write_bytes(b"ok \xff\xfe end")
        assert read_text(path) == "ok \ufffd\ufffd end"

    def test_line_endings_untouched(self, tmp_path):
        path = tmp_path / "spec.md"
        path.write_bytes(b"a\r\nb\r\n")
        assert read_text(path) == "a\r\nb\r\n"


class TestReadDir:
    """Test read_dir function."""

    def test_missing_directory(self, tmp_path):
        assert read_dir(tmp_path / "checklists", ".md") == []

    def test_filters_sorts_and_excludes(self, tmp_path):
        (tmp_path / "ux.md").write_text("ux")
        (tmp_path / "api.md").write_text("api")
        (tmp_path / "requirements.md").write_text("req")
        (tmp_path / "notes.txt").write_text("txt")
        (tmp_path / "sub.md").mkdir()

        docs = read_dir(tmp_path, ".md", exclude=["requirements.md"])

        assert docs == [NamedText("api.md", "api"), NamedText("ux.md", "ux")]


class TestFeatureDocuments:
    """Test FeatureDocuments properties."""

    def test_scenario_text_in_filename_order(self):
        docs = FeatureDocuments(
            feature_id="001-x",
            scenarios=[NamedText("b.feature", "B"), NamedText("a.feature", "A")],
        )
        assert docs.scenario_text == "A\nB"

    def test_empty_scenarios(self):
        assert FeatureDocuments(feature_id="001-x").scenario_text == ""


class TestReadFeatureDocuments:
    """Test read_feature_documents function."""

    def test_missing_feature(self, tmp_path):
        with pytest.raises(FeatureNotFound) as exc_info:
            read_feature_documents(tmp_path, "999-missing", ProjectConfig())

        assert exc_info.value.feature_id == "999-missing"
        assert "999-missing" in str(exc_info.value)

    def test_feature_not_found_is_file_not_found(self):
        assert issubclass(FeatureNotFound, FileNotFoundError)

    def test_snapshot(self, tmp_path):
        fdir = tmp_path / "specs" / "001-kanban"
        (fdir / "checklists").mkdir(parents=True)
        (fdir / "tests" / "features").mkdir(parents=True)
        (tmp_path / "CONSTITUTION.md").write_text("# Constitution")
        (fdir / "spec.md").write_text("# Spec")
        (fdir / "checklists" / "api.md").write_text("- [ ] a")
        (fdir / "checklists" / "requirements.md").write_text("- [ ] skip")
        (fdir / "tests" / "features" / "cards.feature").write_text("Feature: Cards")

        docs = read_feature_documents(tmp_path, "001-kanban", ProjectConfig())

        assert docs.feature_id == "001-kanban"
        assert docs.constitution == "# Constitution"
        assert docs.spec == "# Spec"
        assert docs.plan is None
        assert docs.premise is None
        assert docs.feature_context is None
        assert [c.name for c in docs.checklists] == ["api.md"]
        assert [s.name for s in docs.scenarios] == ["cards.feature"]

    def test_custom_layout(self, tmp_path):
        fdir = tmp_path / "features" / "002-x"
        fdir.mkdir(parents=True)
        (fdir / "requirements.md").write_text("# Spec")

        config = ProjectConfig(specs_dir="features", spec="requirements.md")
        docs = read_feature_documents(tmp_path, "002-x", config)

        assert docs.spec == "# Spec"

    def test_remote_not_queried_without_bugs(self, tmp_path):
        (tmp_path / "specs" / "001-x").mkdir(parents=True)

        with patch("specgate.lib.documents.remote_url") as mock_remote:
            docs = read_feature_documents(tmp_path, "001-x", ProjectConfig())

        mock_remote.assert_not_called()
        assert docs.bugs is None
        assert docs.repo_url is None

    def test_bugs_with_repo_url(self, tmp_path):
        fdir = tmp_path / "specs" / "001-x"
        fdir.mkdir(parents=True)
        (fdir / "bugs.md").write_text("## BUG-001\n")

        with patch("specgate.lib.documents.remote_url", return_value="git@github.com:acme/board.git") as mock_remote:
            docs = read_feature_documents(tmp_path, "001-x", ProjectConfig())

        mock_remote.assert_called_once_with(tmp_path)
        assert docs.bugs == "## BUG-001\n"
        assert docs.repo_url == "git@github.com:acme/board.git"
