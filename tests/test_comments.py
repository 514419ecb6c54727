import pytest

from cssminify.comments import CommentAction, classify, classify_comments, collect_comments
from cssminify.vault import Kind, PlaceholderVault


class TestClassify:
    """Comment classification by body and preceding character."""

    @pytest.mark.parametrize('body, preceding_char, expected', [
        ('! license ', '', CommentAction.PRESERVE_VERBATIM),
        (' mac hack \\', '', CommentAction.MAC_HACK),
        ('', '>', CommentAction.PRESERVE_EMPTY),
        ('', '', CommentAction.DELETE),
        (' plain ', '>', CommentAction.DELETE),
    ])
    def test_classify(self, body: str, preceding_char: str, expected: CommentAction) -> None:
        assert expected == classify(body, preceding_char)

    def test_bang_wins_over_backslash(self) -> None:
        assert CommentAction.PRESERVE_VERBATIM == classify('! ends with \\')


def test_collect_replaces_bodies_with_candidate_tokens() -> None:
    vault = PlaceholderVault()
    css = collect_comments('a{}/* one */b{}/*two*/', vault)

    assert (
        'a{}/*___PRESERVED_CANDIDATE_COMMENT_0___*/'
        'b{}/*___PRESERVED_CANDIDATE_COMMENT_1___*/'
    ) == css
    assert ' one ' == vault.resolve(0, Kind.CANDIDATE_COMMENT)
    assert 'two' == vault.resolve(1, Kind.CANDIDATE_COMMENT)


def test_collect_runs_unterminated_comment_to_the_end() -> None:
    vault = PlaceholderVault()
    css = collect_comments('a{}/* open', vault)

    assert 'a{}/*___PRESERVED_CANDIDATE_COMMENT_0___' == css
    assert ' open' == vault.resolve(0, Kind.CANDIDATE_COMMENT)


def test_collect_does_not_reuse_closing_star() -> None:
    vault = PlaceholderVault()
    collect_comments('/* a */*{color:red}', vault)
    assert 1 == vault.count(Kind.CANDIDATE_COMMENT)


def _classify(css: str) -> str:
    vault = PlaceholderVault()
    css = collect_comments(css, vault)
    css = classify_comments(css, vault)
    return vault.restore(css, Kind.TOKEN)


def test_ordinary_comments_are_deleted() -> None:
    assert 'a{}b{}' == _classify('a{}/* x */b{}/**/')


def test_bang_comment_is_kept() -> None:
    assert '/*! keep */a{}' == _classify('/*! keep */a{}')


def test_child_hack_comment_is_kept_empty() -> None:
    assert 'html>/**/body{}' == _classify('html>/**/body{}')


def test_non_empty_comment_after_child_combinator_is_deleted() -> None:
    assert 'html>body{}' == _classify('html>/* x */body{}')


def test_mac_hack_empties_the_following_comment() -> None:
    assert r'/*\*/a{}/**/b{}' == _classify(r'/* hide \*/a{}/* show */b{}')


def test_mac_hack_as_last_comment() -> None:
    assert r'a{}/*\*/' == _classify(r'a{}/* hide \*/')
