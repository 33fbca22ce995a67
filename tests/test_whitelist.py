import pytest

from blocklist_updater.config import WHITELIST_RULES
from blocklist_updater.whitelist import (
    ContainsRule, EqualRule, PrefixRule, RegexRule, SuffixRule, Whitelist,
    load_whitelist_rules, rule_matches,
)


@pytest.mark.parametrize("rule,domain,expected", [
    (ContainsRule("mozilla"), "cdn.mozilla.net", True),
    (ContainsRule("mozilla"), "example.com", False),
    (PrefixRule("ads."), "ads.example.com", True),
    (PrefixRule("ads."), "myads.example.com", False),
    (SuffixRule(".googlevideo.com"), "v1.googlevideo.com", True),
    (SuffixRule(".googlevideo.com"), "googlevideo.com", False),
    (EqualRule("qq.com"), "qq.com", True),
    (EqualRule("qq.com"), "www.qq.com", False),
    (RegexRule(r"^[^\.]+\.elb\.amazonaws\.com"), "x.elb.amazonaws.com", True),
    (RegexRule(r"^[^\.]+\.elb\.amazonaws\.com"), "a.b.elb.amazonaws.com", False),
    (RegexRule(r"[^ad]\.mail\.ru"), "r.mail.ru", True),
])
def test_rule_matches(rule, domain, expected):
    assert rule_matches(rule, domain) is expected


def test_first_match_wins_and_is_counted():
    whitelist = Whitelist([SuffixRule(".example.com"), ContainsRule("example")])
    assert whitelist.match("a.example.com") == SuffixRule(".example.com")
    assert whitelist.is_whitelisted("example.org")
    assert not whitelist.is_whitelisted("tracker.net")
    assert whitelist.hit_report() == {"suffix:.example.com": 1, "contains:example": 1}


def test_default_rules():
    whitelist = Whitelist(WHITELIST_RULES)
    assert whitelist.is_whitelisted("v1.googlevideo.com")
    assert whitelist.is_whitelisted("www.google-analytics.com")
    assert whitelist.is_whitelisted("s3-eu-west-1.amazonaws.com")
    assert not whitelist.is_whitelisted("ads.example.com")


def test_load_whitelist_rules(tmp_path):
    path = tmp_path / "whitelist.txt"
    path.write_text(
        "# local exceptions\n"
        "suffix:.example.com  # trailing comment\n"
        "equal:tracker.net\n"
        "regex:^cdn\\d+#?\\.\n"
        "regex:([\n"
        "wildcard:*.foo.com\n"
        "prefix:\n"
        "\n",
        encoding="utf-8",
    )
    rules = load_whitelist_rules(str(path))
    assert rules == [
        SuffixRule(".example.com"),
        EqualRule("tracker.net"),
        RegexRule(r"^cdn\d+#?\."),
    ]


def test_load_missing_whitelist(tmp_path):
    assert load_whitelist_rules(str(tmp_path / "missing.txt")) == []
