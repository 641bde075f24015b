import pytest

from go_sortimports.rules import PREFIX_RULES
from go_sortimports.rules import MembershipResolver
from go_sortimports.rules import PrefixResolver
from go_sortimports.rules import Tier
from go_sortimports.rules import local_package_prefix


@pytest.mark.parametrize(
    "pkg, expected",
    [
        ("gopkg.in/juju/foo.v1", "gopkg.in/juju/foo.v1"),
        ("gopkg.in/juju/foo.v1/arble/bletch", "gopkg.in/juju/foo.v1"),
        ("gopkg.in/juju/foo.v1a/arble/bletch", ""),
        ("gopkg.in/juju.v1/arble/bletch", "gopkg.in/juju.v1"),
        ("gopkg.in/juju.v1a/arble.v1/bletch", "gopkg.in/juju.v1a/arble.v1"),
        ("github.com/rogpeppe/sortimports", "github.com/rogpeppe/sortimports"),
        ("github.com/rogpeppe/sortimports/foo", "github.com/rogpeppe/sortimports"),
        ("launchpad.net/foo", "launchpad.net/foo"),
        ("launchpad.net/foo/bar", "launchpad.net/foo"),
        ("code.google.com/p/arble", "code.google.com/p/arble"),
        ("code.google.com/p/arble/bletch", "code.google.com/p/arble"),
        ("example.com/acme/widget/cmd", "example.com/acme"),
        ("widget/internal", ""),
        ("", ""),
    ],
)
def test_local_package_prefix(pkg, expected):
    assert local_package_prefix(pkg) == expected


def test_versioned_rule_takes_precedence_over_generic_rule():
    # The generic rule alone would stop at the owner segment.
    generic = [rule for rule in PREFIX_RULES if rule.name == "generic"]
    assert local_package_prefix("gopkg.in/yaml.v2/sub", generic) == ""
    assert local_package_prefix("gopkg.in/yaml.v2/sub") == "gopkg.in/yaml.v2"
    github = [rule for rule in PREFIX_RULES if rule.name == "github"]
    assert local_package_prefix("github.com/a/b/c", github) == "github.com/a/b"


def test_prefix_resolver_classification():
    resolver = PrefixResolver("github.com/acme/widget")
    assert resolver.classify("fmt") == Tier.STANDARD
    assert resolver.classify("net/http") == Tier.STANDARD
    assert resolver.classify("github.com/other/lib") == Tier.EXTERNAL
    assert resolver.classify("github.com/acme/widget") == Tier.LOCAL
    assert resolver.classify("github.com/acme/widget/util") == Tier.LOCAL
    # A shared string prefix is not a path prefix.
    assert resolver.classify("github.com/acme/widgetry") == Tier.EXTERNAL


def test_empty_prefix_marks_nothing_local():
    resolver = PrefixResolver("")
    assert not resolver.is_local("")
    assert resolver.classify("widget/util") == Tier.STANDARD
    assert resolver.classify("example.com/x") == Tier.EXTERNAL


def test_prefix_resolver_for_package():
    resolver = PrefixResolver.for_package("github.com/acme/widget/cmd/widget")
    assert resolver.prefix == "github.com/acme/widget"


def test_membership_resolver_uses_metadata():
    resolver = MembershipResolver(
        "example.com/widget",
        local={"example.com/widget/util"},
        standard={"fmt", "internal.example/std"},
        known={"example.com/widget/util", "fmt", "internal.example/std", "example.com/widget/nested"},
    )
    assert resolver.classify("example.com/widget/util") == Tier.LOCAL
    assert resolver.classify("fmt") == Tier.STANDARD
    assert resolver.classify("internal.example/std") == Tier.STANDARD
    # Known to the metadata but in another module.
    assert resolver.classify("example.com/widget/nested") == Tier.EXTERNAL
    assert resolver.classify("github.com/other/lib") == Tier.EXTERNAL


def test_membership_and_prefix_resolvers_agree_on_exact_and_subpaths():
    prefix = PrefixResolver("github.com/acme/widget")
    membership = MembershipResolver("github.com/acme/widget")
    for path in ["github.com/acme/widget", "github.com/acme/widget/util", "github.com/acme/widgetry", "os"]:
        assert prefix.classify(path) == membership.classify(path)


def test_tier_order():
    assert Tier.STANDARD < Tier.EXTERNAL < Tier.LOCAL
