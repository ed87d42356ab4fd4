"""Tests for TagInventory."""

import logging
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from calrelease.domain.release import EPOCH
from calrelease.infra.git_client import GitError
from calrelease.services.inventory import TagInventory
from calrelease.services.proposer import VersionProposer

UTC = timezone.utc


class TestTagInventory:

    def test_empty_repository(self, fake_git):
        index = TagInventory(fake_git).load("/repo")
        assert len(index) == 0
        assert fake_git.batch_reads == 0

    def test_lightweight_tag(self, fake_git):
        commit = fake_git.add_commit("Add feature\n\nDetails", datetime(2020, 7, 1, tzinfo=UTC))
        fake_git.add_lightweight_tag("2020.07.001-release", commit)

        index = TagInventory(fake_git).load("/repo")

        assert len(index) == 1
        record = index[0]
        assert record.tag == "2020.07.001-release"
        assert record.commit_hash == commit
        assert record.tagger is None
        assert record.release_message == ""
        assert record.commit_message == "Add feature\n\nDetails"
        assert record.committer.when == datetime(2020, 7, 1, tzinfo=UTC)

    def test_annotated_tag(self, fake_git):
        commit = fake_git.add_commit("Add feature", datetime(2020, 7, 1, tzinfo=UTC))
        fake_git.add_annotated_tag("2020.07.002-ui", commit, "UI release notes")

        record = TagInventory(fake_git).load("/repo")[0]

        assert record.tag == "2020.07.002-ui"
        assert record.commit_hash == commit
        assert record.tagger is not None
        assert record.tagger.name == "Tagger"
        assert record.release_message == "UI release notes"
        # Ordering date still comes from the commit
        assert record.date == datetime(2020, 7, 1, tzinfo=UTC)

    def test_annotated_tag_uses_name_from_tag_object(self, fake_git):
        commit = fake_git.add_commit()
        sha = fake_git.add_annotated_tag("2020.07.001-release", commit, "notes")
        fake_git.refs = {"renamed-ref": sha}

        record = TagInventory(fake_git).load("/repo")[0]
        assert record.tag == "2020.07.001-release"

    def test_objects_are_read_in_bulk(self, fake_git):
        commit = fake_git.add_commit()
        for i in range(1, 51):
            fake_git.add_lightweight_tag(f"2020.07.{i:03d}-release", commit)
            fake_git.add_annotated_tag(f"2020.08.{i:03d}-release", commit, "notes")

        index = TagInventory(fake_git).load("/repo")

        assert len(index) == 100
        # One read for the ref targets, one for the commits behind tag objects
        assert fake_git.batch_reads == 2

    def test_lightweight_only_needs_one_read(self, fake_git):
        commit = fake_git.add_commit()
        fake_git.add_lightweight_tag("2020.07.001-release", commit)
        fake_git.add_lightweight_tag("2020.07.002-release", commit)

        TagInventory(fake_git).load("/repo")
        assert fake_git.batch_reads == 1

    def test_annotated_tag_with_missing_commit_is_skipped(self, fake_git):
        good = fake_git.add_commit()
        fake_git.add_lightweight_tag("2020.07.001-release", good)
        fake_git.add_annotated_tag("2020.07.002-release", "f" * 40, "points nowhere")
        diagnostics = MagicMock(spec=logging.Logger)

        index = TagInventory(fake_git, diagnostics=diagnostics).load("/repo")

        assert index.tags() == ["2020.07.001-release"]
        diagnostics.error.assert_called_once()
        assert "2020.07.002-release" in diagnostics.error.call_args[0][0]

    def test_tag_of_a_tag_is_skipped(self, fake_git):
        commit = fake_git.add_commit()
        inner = fake_git.add_annotated_tag("inner", commit, "inner notes")
        fake_git.add_annotated_tag("2020.07.001-release", inner, "outer notes")
        diagnostics = MagicMock(spec=logging.Logger)

        index = TagInventory(fake_git, diagnostics=diagnostics).load("/repo")

        assert index.tags() == ["inner"]
        assert "2020.07.001-release" in diagnostics.error.call_args[0][0]

    def test_ref_to_missing_object_is_skipped(self, fake_git):
        good = fake_git.add_commit()
        fake_git.add_lightweight_tag("2020.07.001-release", good)
        fake_git.add_lightweight_tag("broken", "e" * 40)
        diagnostics = MagicMock(spec=logging.Logger)

        index = TagInventory(fake_git, diagnostics=diagnostics).load("/repo")

        assert index.tags() == ["2020.07.001-release"]
        assert "broken" in diagnostics.error.call_args[0][0]

    def test_annotated_tag_without_tagger_is_kept(self, fake_git):
        commit = fake_git.add_commit("work", datetime(2020, 5, 3, tzinfo=UTC))
        fake_git.add_annotated_tag("2020.05.001-release", commit, "notes", tagger="")
        diagnostics = MagicMock(spec=logging.Logger)

        index = TagInventory(fake_git, diagnostics=diagnostics).load("/repo")

        assert index.tags() == ["2020.05.001-release"]
        record = index[0]
        assert record.is_annotated
        assert record.tagger.name == ""
        assert record.tagger.email == ""
        assert record.tagger.when == EPOCH
        assert record.release_message == "notes"
        diagnostics.warning.assert_called_once()
        diagnostics.error.assert_not_called()

        # The kept tag still takes part in the collision check
        proposal = VersionProposer(always_include_number=True).propose(
            index, datetime(2020, 5, 10, tzinfo=UTC), "release",
        )
        assert proposal.name == "2020.05.002-release"

    def test_commit_with_unreadable_committer_is_kept(self, fake_git):
        commit = fake_git.add_commit()
        obj = fake_git.objects[commit]
        obj.committer = "Broken Committer <broken@example.com>"
        fake_git.add_lightweight_tag("2020.07.001-release", commit)
        diagnostics = MagicMock(spec=logging.Logger)

        index = TagInventory(fake_git, diagnostics=diagnostics).load("/repo")

        record = index[0]
        assert record.committer.name == "Broken Committer"
        assert record.date == EPOCH
        assert "committer" in diagnostics.warning.call_args[0][0]

    def test_records_sorted(self, fake_git):
        older = fake_git.add_commit("old", datetime(2020, 6, 1, tzinfo=UTC))
        newer = fake_git.add_commit("new", datetime(2020, 7, 1, tzinfo=UTC))
        fake_git.add_lightweight_tag("2020.06.001-release", older)
        fake_git.add_lightweight_tag("2020.07.002-ui", newer)
        fake_git.add_annotated_tag("2020.07.001-release", newer, "notes")

        index = TagInventory(fake_git).load("/repo")

        assert index.tags() == ["2020.07.001-release", "2020.07.002-ui", "2020.06.001-release"]

    def test_load_is_idempotent(self, fake_git):
        commit = fake_git.add_commit()
        fake_git.add_lightweight_tag("2020.07.001-release", commit)
        fake_git.add_annotated_tag("2020.07.002-release", commit, "notes")
        inventory = TagInventory(fake_git)

        assert inventory.load("/repo") == inventory.load("/repo")

    def test_listing_failure_propagates(self):
        git = MagicMock()
        git.tag_refs.side_effect = GitError("failed to list tags")

        with pytest.raises(GitError):
            TagInventory(git).load("/repo")

    def test_object_read_failure_propagates(self, fake_git):
        commit = fake_git.add_commit()
        fake_git.add_lightweight_tag("2020.07.001-release", commit)
        fake_git.read_objects = MagicMock(side_effect=GitError("failed to read objects"))

        with pytest.raises(GitError):
            TagInventory(fake_git).load("/repo")
