from blocklist_updater.tlds import (
    TLDReference, bootstrap_tlds, parse_effective_tld_names, parse_tld_list,
)

TLDS_URL = "http://tlds.test/tlds-alpha-by-domain.txt"
ETLD_URL = "http://tlds.test/effective_tld_names.dat"

TLD_BODY = """# Version 2024010100, Last Updated Mon Jan  1 07:07:01 2024 UTC
COM
NET
XN--P1AI
"""

ETLD_BODY = """// ===BEGIN ICANN DOMAINS===

// ac : https://en.wikipedia.org/wiki/.ac
ac
com.ac
// uk
*.sch.uk
!city.kawasaki.jp
co.uk
"""


def test_parse_tld_list_lowercases_and_skips_comments():
    assert parse_tld_list(TLD_BODY.splitlines()) == {'com', 'net', 'xn--p1ai'}


def test_parse_effective_tld_names():
    labels, suffixes = parse_effective_tld_names(ETLD_BODY.splitlines())
    assert labels == {'ac'}
    assert suffixes == ['.com.ac', '.co.uk']


def test_matches_last_label_or_suffix():
    reference = TLDReference(tlds=frozenset({'com'}), suffixes=('.co.uk',))
    assert reference.matches('ads.example.com')
    assert reference.matches('ads.example.co.uk')
    assert not reference.matches('ads.example.uk')
    assert not reference.matches('example.invalid')


def test_empty_reference_matches_nothing():
    assert not TLDReference().matches('example.com')


def test_bootstrap_merges_both_lists(make_client):
    client = make_client({TLDS_URL: TLD_BODY, ETLD_URL: ETLD_BODY})
    reference = bootstrap_tlds(client, TLDS_URL, ETLD_URL)
    assert reference.tlds == {'com', 'net', 'xn--p1ai', 'ac'}
    assert reference.suffixes == ('.com.ac', '.co.uk')


def test_bootstrap_survives_failed_download(make_client):
    client = make_client({ETLD_URL: ETLD_BODY}, attempts=2)
    reference = bootstrap_tlds(client, TLDS_URL, ETLD_URL)
    assert reference.tlds == {'ac'}
    assert reference.matches('example.co.uk')
    assert not reference.matches('example.com')
