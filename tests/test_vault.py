from cssminify.vault import Kind, PlaceholderVault


def test_protect_returns_sequential_tokens_per_kind() -> None:
    vault = PlaceholderVault()
    assert '___PRESERVED_TOKEN_0___' == vault.protect('a')
    assert '___PRESERVED_TOKEN_1___' == vault.protect('b')
    assert '___PRESERVED_CALC_0___' == vault.protect('calc(1px + 2px)', Kind.CALC)
    assert 2 == vault.count(Kind.TOKEN)
    assert 1 == vault.count(Kind.CALC)
    assert 3 == len(vault)


def test_restore_only_touches_the_requested_kind() -> None:
    vault = PlaceholderVault()
    token = vault.protect('"x"')
    calc = vault.protect('calc(1px)', Kind.CALC)

    restored = vault.restore(f'{token} {calc}', Kind.TOKEN)
    assert f'"x" {calc}' == restored


def test_restore_does_not_rescan_substituted_text() -> None:
    vault = PlaceholderVault()
    vault.protect('___PRESERVED_TOKEN_1___')
    vault.protect('second')

    assert '___PRESERVED_TOKEN_1___' == vault.restore('___PRESERVED_TOKEN_0___')


def test_restore_leaves_unknown_indices_alone() -> None:
    vault = PlaceholderVault()
    vault.protect('only')
    assert 'only ___PRESERVED_TOKEN_7___' == vault.restore(
        '___PRESERVED_TOKEN_0___ ___PRESERVED_TOKEN_7___')


def test_restore_on_empty_vault_is_identity() -> None:
    assert '___PRESERVED_TOKEN_0___' == PlaceholderVault().restore('___PRESERVED_TOKEN_0___')


def test_pattern_captures_index() -> None:
    vault = PlaceholderVault()
    m = vault.pattern(Kind.FILTER).search('x___PRESERVED_FILTER_12___y')
    assert m is not None
    assert '12' == m.group(1)
