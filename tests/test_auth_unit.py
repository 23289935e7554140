from storefront.auth import Capability, resolve_capability


def test_admin_claim_resolves_to_admin():
    assert resolve_capability("admin") is Capability.ADMIN
    assert resolve_capability(" Admin ") is Capability.ADMIN


def test_anything_else_is_guest():
    """Test that missing or unknown claims never grant admin."""
    for claim in [None, "", "guest", "farooq@gmail.com", "administrator"]:
        assert resolve_capability(claim) is Capability.GUEST
