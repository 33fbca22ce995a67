from blocklist_updater.optimizer import build_variants, optimize, parent_domains

SHORTLINKS = ["bit.ly", "www.bit.ly", "goo.gl"]


def test_parent_domains():
    assert list(parent_domains("a.b.example.com")) == ["b.example.com", "example.com", "com"]
    assert list(parent_domains("com")) == []


def test_subdomain_dropped_in_favour_of_parent():
    assert optimize({"ads.example.com", "example.com"}) == {"example.com"}


def test_distant_ancestor_covers_subdomain():
    domains = {"x.y.ads.example.com", "example.com", "tracker.net"}
    assert optimize(domains) == {"example.com", "tracker.net"}


def test_siblings_and_lookalikes_are_kept():
    domains = {"a.example.com", "b.example.com", "badexample.com", "example.com.evil.net"}
    assert optimize(domains) == domains


def test_optimize_is_idempotent():
    domains = {"a.b.c.com", "b.c.com", "d.c.com", "e.f.org", "g.h.org", "h.org"}
    once = optimize(domains)
    assert optimize(once) == once
    for domain in once:
        assert not any(parent in once for parent in parent_domains(domain))


def test_variants():
    final = {"ads.example.com", "example.com", "bit.ly", "tracker.net"}
    variants = build_variants(final, SHORTLINKS)

    assert variants.without_shortlinks == ["ads.example.com", "example.com", "tracker.net"]
    assert variants.plain == ["ads.example.com", "bit.ly", "example.com", "goo.gl", "tracker.net", "www.bit.ly"]
    assert variants.optimized_without_shortlinks == ["example.com", "tracker.net"]
    assert variants.optimized == ["bit.ly", "example.com", "goo.gl", "tracker.net", "www.bit.ly"]


def test_plain_minus_shortlinks_equals_without_shortlinks():
    for final in [set(), {"bit.ly"}, {"a.com", "b.a.com", "goo.gl", "x.org"}]:
        variants = build_variants(final, SHORTLINKS)
        assert set(variants.plain) - set(SHORTLINKS) == set(variants.without_shortlinks)
        assert set(variants.optimized) - set(SHORTLINKS) == set(variants.optimized_without_shortlinks)
