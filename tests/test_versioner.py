"""
Tests for versioner.py module.

Tests the derivation rules (height bump, branch name, build metadata,
minimum MAJOR.MINOR) and resolve_version with the git collaborator mocked.
"""

import pytest
from unittest.mock import patch

from tagver.candidates import Candidate, find_candidates, select_candidate
from tagver.commits import Commit
from tagver.version import MajorMinor, Version, VersionPart
from tagver.versioner import (
    apply_branch_name,
    apply_height,
    derive_version,
    normalize_branch_name,
    resolve_version,
)

from helpers import make_chain, make_commits


def tagged(text, height):
    return Candidate('a' * 40, height, text, Version.parse(text))


class TestApplyHeight:
    """Test the height bump rule."""

    def test_height_zero_uses_tag(self):
        """Test that a commit on a tag keeps the tagged version."""
        version = apply_height(Version.parse('1.2.3+meta'), 0, VersionPart.PATCH, ['alpha', '0'])
        assert str(version) == '1.2.3+meta'
        assert version.height == 0

    def test_patch_bump(self):
        """Test the default patch bump with height appended."""
        version = apply_height(Version.parse('1.2.3'), 1, VersionPart.PATCH, ['alpha', '0'])
        assert str(version) == '1.2.4-alpha.0.1'
        assert version.height == 1

    def test_minor_bump(self):
        """Test bumping the minor part."""
        version = apply_height(Version.parse('1.2.3'), 4, VersionPart.MINOR, ['alpha', '0'])
        assert str(version) == '1.3.0-alpha.0.4'

    def test_major_bump(self):
        """Test bumping the major part."""
        version = apply_height(Version.parse('1.2.3'), 2, VersionPart.MAJOR, ['beta'])
        assert str(version) == '2.0.0-beta.2'

    def test_empty_default_identifiers(self):
        """Test that the height alone forms the pre-release."""
        version = apply_height(Version.parse('1.2.3'), 3, VersionPart.PATCH, [])
        assert str(version) == '1.2.4-3'

    def test_ignore_height(self):
        """Test that ignore_height keeps the tagged version."""
        version = apply_height(Version.parse('1.2.3'), 7, VersionPart.PATCH, ['alpha', '0'], ignore_height=True)
        assert str(version) == '1.2.3'
        assert version.height == 7


class TestApplyBranchName:
    """Test branch name injection."""

    def test_normalize(self):
        """Test that slashes become hyphens."""
        assert normalize_branch_name('feature/awesome-feature') == 'feature-awesome-feature'

    def test_bare_height_replaced(self):
        """Test that a height-only pre-release becomes the branch name."""
        version = Version.parse('1.2.4-1').with_height(1)
        assert str(apply_branch_name(version, 'feature-xyz')) == '1.2.4-feature-xyz'

    def test_no_pre_release(self):
        """Test that a release gets the branch name as its only identifier."""
        assert str(apply_branch_name(Version.parse('1.2.3'), 'develop')) == '1.2.3-develop'

    def test_height_dropped_and_branch_prepended(self):
        """Test the trailing height identifier is dropped before prepending."""
        version = Version.parse('1.2.4-alpha.0.1').with_height(1)
        assert str(apply_branch_name(version, 'feature/x')) == '1.2.4-feature-x.alpha.0'

    def test_trailing_identifier_kept_when_not_height(self):
        """Test that only an identifier equal to the height is dropped."""
        version = Version.parse('1.0.0-rc.1')
        assert str(apply_branch_name(version, 'hotfix')) == '1.0.0-hotfix.rc.1'

    def test_ignored_branch(self):
        """Test that ignored branch names are left out."""
        version = Version.parse('1.2.4-alpha.0.1').with_height(1)
        result = apply_branch_name(version, 'main', ['main', 'master'])
        assert str(result) == '1.2.4-alpha.0.1'

    def test_ignore_is_case_sensitive(self):
        """Test exact matching against ignored names."""
        result = apply_branch_name(Version.parse('1.0.0'), 'Main', ['main'])
        assert str(result) == '1.0.0-Main'

    def test_no_branch(self):
        """Test detached HEAD leaves the version unchanged."""
        version = Version.parse('1.2.4-alpha.0.1').with_height(1)
        assert apply_branch_name(version, None) is version


class TestDeriveVersion:
    """Test the full derivation pipeline."""

    def test_exact_tag(self):
        """Test a commit exactly on a tag."""
        assert str(derive_version(tagged('1.2.3', 0))) == '1.2.3'

    def test_commit_after_tag_with_build_metadata(self):
        """Test that tag build metadata is discarded after a bump."""
        assert str(derive_version(tagged('2.3.4+build.5', 1))) == '2.3.5-alpha.0.1'

    def test_build_metadata_replaces_tag_metadata(self):
        """Test that configured metadata replaces metadata from the tag."""
        version = derive_version(tagged('1.0.0+tagmeta', 0), build_metadata='ci.7')
        assert str(version) == '1.0.0+ci.7'

    def test_build_metadata_appended(self):
        """Test metadata on a derived version."""
        version = derive_version(tagged('1.0.0', 2), build_metadata='sha.abc123')
        assert str(version) == '1.0.1-alpha.0.2+sha.abc123'

    def test_branch_name_with_empty_identifiers(self):
        """Test a feature branch one commit after a tag with no default identifiers."""
        version = derive_version(tagged('1.2.3', 1), default_pre_release_identifiers=[],
                                 branch_name='feature-xyz', include_branch_name=True)
        assert str(version) == '1.2.4-feature-xyz'

    def test_branch_name_with_default_identifiers(self):
        """Test a feature branch with the default identifiers."""
        version = derive_version(tagged('1.2.3', 1), branch_name='feature-xyz', include_branch_name=True)
        assert str(version) == '1.2.4-feature-xyz.alpha.0'

    def test_branch_name_ignored(self):
        """Test that an ignored branch yields the plain derived version."""
        version = derive_version(tagged('1.2.3', 1), branch_name='feature-xyz', include_branch_name=True,
                                 branch_names_to_ignore=['feature-xyz'])
        assert str(version) == '1.2.4-alpha.0.1'

    def test_branch_name_not_included_by_default(self):
        """Test that the branch is only used when requested."""
        version = derive_version(tagged('1.2.3', 1), branch_name='feature-xyz')
        assert str(version) == '1.2.4-alpha.0.1'

    def test_minimum_major_minor_raises_version(self):
        """Test that a version below the floor is raised to floor.0 with default identifiers and height."""
        version = derive_version(tagged('1.2.3', 3), minimum_major_minor=MajorMinor(2, 0))
        assert str(version) == '2.0.0-alpha.0.3'
        assert version.height == 3

    def test_minimum_major_minor_keeps_build_metadata(self):
        """Test that the raised version keeps the configured metadata."""
        version = derive_version(tagged('1.2.3', 3), minimum_major_minor=MajorMinor(2, 0), build_metadata='b.1')
        assert str(version) == '2.0.0-alpha.0.3+b.1'

    def test_minimum_major_minor_distinct_per_height(self):
        """Test that successive commits below the floor get distinct versions."""
        lower = derive_version(tagged('0.5.0', 3), minimum_major_minor=MajorMinor(1, 0))
        higher = derive_version(tagged('0.5.0', 5), minimum_major_minor=MajorMinor(1, 0))

        assert (str(lower), str(higher)) == ('1.0.0-alpha.0.3', '1.0.0-alpha.0.5')
        assert lower < higher

    def test_minimum_major_minor_with_ignore_height(self):
        """Test that ignore_height leaves the height out of the raised version."""
        version = derive_version(tagged('0.5.0', 4), minimum_major_minor=MajorMinor(1, 0), ignore_height=True)
        assert str(version) == '1.0.0-alpha.0'

    def test_minimum_major_minor_bypassed_on_tag(self):
        """Test that a commit exactly on a tag is never raised."""
        version = derive_version(tagged('1.2.3', 0), minimum_major_minor=MajorMinor(2, 0))
        assert str(version) == '1.2.3'

    def test_minimum_major_minor_applies_to_untagged_root(self):
        """Test that a lone untagged root commit is raised to the floor."""
        candidate = select_candidate(find_candidates(Commit('a' * 40), []))

        version = derive_version(candidate, minimum_major_minor=MajorMinor(1, 0))

        assert str(version) == '1.0.0-alpha.0'
        assert version.height == 0

    def test_minimum_major_minor_already_satisfied(self):
        """Test that a version at or above the floor is unchanged."""
        version = derive_version(tagged('2.1.0', 1), minimum_major_minor=MajorMinor(2, 1))
        assert str(version) == '2.1.1-alpha.0.1'

    def test_minimum_major_minor_logged(self, log_messages):
        """Test that raising the version is logged."""
        derive_version(tagged('0.1.0', 1), minimum_major_minor=MajorMinor(1, 0))
        assert 'Bumping version to 1.0.0-alpha.0.1 to satisfy 1.0 range.' in log_messages

    def test_inputs_not_mutated(self):
        """Test that the candidate is unchanged."""
        candidate = tagged('1.2.3+meta', 2)
        derive_version(candidate, build_metadata='x', include_branch_name=True, branch_name='b')
        assert str(candidate.version) == '1.2.3+meta'
        assert candidate.height == 2


class TestResolveVersion:
    """Test resolve_version with a mocked git collaborator."""

    @patch('tagver.versioner.git.try_find_repository_root', return_value=None)
    def test_not_a_repository(self, mock_root, log_messages):
        """Test that a directory outside git yields the default version."""
        version = resolve_version('/nowhere')
        assert str(version) == '0.0.0-alpha.0'
        assert version.height == 0
        assert any('is not a valid Git working directory' in m for m in log_messages)

    @patch('tagver.versioner.git.is_readable_repository', return_value=True)
    @patch('tagver.versioner.git.try_get_head', return_value=None)
    @patch('tagver.versioner.git.try_find_repository_root', return_value='/repo')
    def test_no_commits(self, mock_root, mock_head, mock_readable, log_messages):
        """Test that an empty repository yields the default version."""
        version = resolve_version('/repo', build_metadata='meta')
        assert str(version) == '0.0.0-alpha.0+meta'
        assert 'No commits found. Using default version.' in log_messages

    @patch('tagver.versioner.git.is_readable_repository', return_value=False)
    @patch('tagver.versioner.git.try_get_head', return_value=None)
    @patch('tagver.versioner.git.try_find_repository_root', return_value='/repo')
    def test_git_failure_reported(self, mock_root, mock_head, mock_readable, log_messages):
        """Test that git failing is reported as a failure, not as an empty history."""
        version = resolve_version('/repo')

        assert str(version) == '0.0.0-alpha.0'
        assert "Failed to read Git history in '/repo'. Using default version." in log_messages
        assert 'No commits found. Using default version.' not in log_messages

    @patch('tagver.versioner.git.try_get_current_branch')
    @patch('tagver.versioner.git.get_tags')
    @patch('tagver.versioner.git.try_get_head')
    @patch('tagver.versioner.git.try_find_repository_root', return_value='/repo')
    def test_resolves_from_history(self, mock_root, mock_head, mock_tags, mock_branch):
        """Test resolution over a mocked linear history."""
        chain = make_chain(4)
        mock_head.return_value = chain[-1]
        mock_tags.return_value = [('v1.0.0', chain[1].sha), ('notes', chain[2].sha)]

        version = resolve_version('/repo', tag_prefix='v')

        assert str(version) == '1.0.1-alpha.0.2'
        assert version.height == 2
        mock_branch.assert_not_called()

    @patch('tagver.versioner.git.try_get_current_branch', return_value='feature/login')
    @patch('tagver.versioner.git.get_tags')
    @patch('tagver.versioner.git.try_get_head')
    @patch('tagver.versioner.git.try_find_repository_root', return_value='/repo')
    def test_includes_branch_name(self, mock_root, mock_head, mock_tags, mock_branch):
        """Test that the branch is looked up only when requested."""
        chain = make_chain(2)
        mock_head.return_value = chain[-1]
        mock_tags.return_value = [('1.0.0', chain[0].sha)]

        version = resolve_version('/repo', include_branch_name=True, default_pre_release_identifiers=[])

        assert str(version) == '1.0.1-feature-login'
        mock_branch.assert_called_once()

    @patch('tagver.versioner.git.get_tags')
    @patch('tagver.versioner.git.try_get_head')
    @patch('tagver.versioner.git.try_find_repository_root', return_value='/repo')
    def test_diamond_merge_selects_tag_with_longest_height(self, mock_root, mock_head, mock_tags):
        """Test branches of length 1 and 3 from tag 0.0.1 merged into one commit."""
        commits = make_commits({
            'tag': [],
            'short': ['tag'],
            'long1': ['tag'],
            'long2': ['long1'],
            'long3': ['long2'],
            'merge': ['short', 'long3'],
        })
        mock_head.return_value = commits['merge']
        mock_tags.return_value = [('0.0.1', 'tag')]

        version = resolve_version('/repo')

        assert version.height == 4
        assert str(version) == '0.0.2-alpha.0.4'

    @patch('tagver.versioner.git.get_tags', return_value=[])
    @patch('tagver.versioner.git.try_get_head')
    @patch('tagver.versioner.git.try_find_repository_root', return_value='/repo')
    def test_single_untagged_root(self, mock_root, mock_head, mock_tags):
        """Test a repository with one untagged commit."""
        mock_head.return_value = Commit('0' * 40)
        assert str(resolve_version('/repo')) == '0.0.0-alpha.0'

    @patch('tagver.versioner.git.get_tags')
    @patch('tagver.versioner.git.try_get_head')
    @patch('tagver.versioner.git.try_find_repository_root', return_value='/repo')
    def test_equal_versions_prefer_closer_tag(self, mock_root, mock_head, mock_tags):
        """Test two tags of equal precedence at different heights."""
        commits = make_commits({
            'root': [],
            'near': ['root'],
            'far1': ['root'],
            'far2': ['far1'],
            'merge': ['near', 'far2'],
        })
        mock_head.return_value = commits['merge']
        mock_tags.return_value = [('1.0.0+far', 'far1'), ('1.0.0+near', 'near')]

        version = resolve_version('/repo', ignore_height=True)

        assert str(version) == '1.0.0+near'
        assert version.height == 1

    @pytest.mark.parametrize('part,expected', [
        (VersionPart.PATCH, '1.2.4-alpha.0.1'),
        (VersionPart.MINOR, '1.3.0-alpha.0.1'),
        (VersionPart.MAJOR, '2.0.0-alpha.0.1'),
    ])
    @patch('tagver.versioner.git.get_tags')
    @patch('tagver.versioner.git.try_get_head')
    @patch('tagver.versioner.git.try_find_repository_root', return_value='/repo')
    def test_auto_increment(self, mock_root, mock_head, mock_tags, part, expected):
        """Test each auto-increment part."""
        chain = make_chain(2)
        mock_head.return_value = chain[-1]
        mock_tags.return_value = [('1.2.3', chain[0].sha)]

        assert str(resolve_version('/repo', auto_increment=part)) == expected
