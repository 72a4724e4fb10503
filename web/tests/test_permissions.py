"""Authorization rules evaluated on plain actor/target snapshots."""

import pytest

from realty.core.exceptions import AuthorizationError, ValidationError
from realty.core.permissions import (
    Action, Actor, Target, PROPERTY_FIELDS, USER_FIELDS, OFFICE_FIELDS,
    authorize, can_act, check_fields, matching_rules,
)


ADMIN = Actor(id=1, role="admin")
BUYER = Actor(id=2, role="buyer")
SELLER = Actor(id=3, role="seller")
MANAGER_O1 = Actor(id=4, role="manager", office_id=10, agent_profile_id=40, verification_status="verified")
AGENT = Actor(id=5, role="agent", office_id=10, agent_profile_id=50, verification_status="verified")


class TestSelfOnly:
    def test_admin_cannot_change_another_users_password(self):
        assert not can_act(ADMIN, Action.CHANGE_PASSWORD, Target.for_user(BUYER.id))

    def test_admin_can_change_own_password(self):
        assert matching_rules(ADMIN, Action.CHANGE_PASSWORD, Target.for_user(ADMIN.id)) == ["self"]

    def test_admin_cannot_select_role_for_someone_else(self):
        assert not can_act(ADMIN, Action.SELECT_ROLE, Target.for_user(BUYER.id))

    def test_user_manages_own_favorites_only(self):
        assert can_act(BUYER, Action.MANAGE_FAVORITES, Target.for_user(BUYER.id))
        assert not can_act(BUYER, Action.MANAGE_FAVORITES, Target.for_user(SELLER.id))


class TestAccountScope:
    def test_admin_views_any_account(self):
        assert can_act(ADMIN, Action.VIEW_USER, Target.for_user(BUYER.id))

    def test_user_cannot_update_other_account(self):
        assert not can_act(BUYER, Action.UPDATE_USER, Target.for_user(SELLER.id))

    def test_manager_self_access_uses_self_rule(self):
        assert matching_rules(MANAGER_O1, Action.UPDATE_USER, Target.for_user(MANAGER_O1.id)) == ["self"]


class TestOfficeAndPropertyScope:
    def test_manager_acts_inside_own_office(self):
        target = Target(office_id=10)
        assert can_act(MANAGER_O1, Action.UPDATE_OFFICE, target)
        assert can_act(MANAGER_O1, Action.UPDATE_PROPERTY, target)

    def test_manager_denied_for_other_office(self):
        assert not can_act(MANAGER_O1, Action.UPDATE_PROPERTY, Target(office_id=20))
        assert not can_act(MANAGER_O1, Action.DELETE_OFFICE, Target(office_id=20))

    def test_manager_without_office_matches_nothing(self):
        manager = Actor(id=6, role="manager", office_id=None)
        assert not can_act(manager, Action.UPDATE_PROPERTY, Target(office_id=None))

    def test_agent_only_on_own_listing(self):
        assert can_act(AGENT, Action.UPDATE_PROPERTY, Target(office_id=10, listing_agent_id=50))
        assert not can_act(AGENT, Action.UPDATE_PROPERTY, Target(office_id=10, listing_agent_id=51))

    def test_agent_has_no_office_scope(self):
        assert not can_act(AGENT, Action.UPDATE_OFFICE, Target(office_id=10))

    def test_listing_held_by_manager_matches_office_scope_only(self):
        # the agent rule is keyed on role, not on holding a profile
        manager_agent = Actor(id=7, role="manager", office_id=10, agent_profile_id=70)
        rules = matching_rules(manager_agent, Action.UPDATE_PROPERTY, Target(office_id=10, listing_agent_id=70))
        assert rules == ["manager"]

    def test_seller_cannot_update_own_submission(self):
        target = Target(owner_id=SELLER.id, office_id=None, listing_agent_id=None)
        assert not can_act(SELLER, Action.UPDATE_PROPERTY, target)


class TestRoleGrants:
    @pytest.mark.parametrize("actor,allowed", [
        (ADMIN, True), (MANAGER_O1, True), (AGENT, False), (BUYER, False),
    ])
    def test_create_office(self, actor, allowed):
        assert can_act(actor, Action.CREATE_OFFICE) is allowed

    def test_submit_property(self):
        assert can_act(SELLER, Action.SUBMIT_PROPERTY)
        assert not can_act(BUYER, Action.SUBMIT_PROPERTY)
        assert matching_rules(ADMIN, Action.SUBMIT_PROPERTY) == ["admin"]

    def test_verify_is_admin_only(self):
        assert can_act(ADMIN, Action.VERIFY_AGENT)
        assert not can_act(MANAGER_O1, Action.VERIFY_AGENT)


class TestInactiveAndAuthorize:
    def test_inactive_actor_denied_everything(self):
        inactive = Actor(id=1, role="admin", is_active=False)
        assert not can_act(inactive, Action.CREATE_OFFICE)
        assert not can_act(inactive, Action.VIEW_USER, Target.for_user(1))

    def test_authorize_raises_forbidden(self):
        with pytest.raises(AuthorizationError) as exc:
            authorize(BUYER, Action.CREATE_OFFICE)
        assert exc.value.kind == "Forbidden"
        assert exc.value.status_code == 403

    def test_authorize_passes_silently(self):
        authorize(ADMIN, Action.CREATE_OFFICE)


class TestFieldTables:
    def test_buyer_cannot_change_role(self):
        with pytest.raises(ValidationError) as exc:
            check_fields(USER_FIELDS, "buyer", {"first_name", "role"})
        assert exc.value.details == {"field": "role"}

    def test_admin_may_change_role(self):
        check_fields(USER_FIELDS, "admin", {"role", "is_active"})

    def test_is_active_never_in_office_table(self):
        assert all("is_active" not in fields for fields in OFFICE_FIELDS.values())

    def test_agent_cannot_reassign_listing(self):
        with pytest.raises(ValidationError):
            check_fields(PROPERTY_FIELDS, "agent", {"listing_agent_id"})

    def test_unknown_role_has_no_fields(self):
        with pytest.raises(ValidationError):
            check_fields(PROPERTY_FIELDS, "buyer", {"title"})
