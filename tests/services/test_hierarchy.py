import pytest
from sqlalchemy.orm import Session

from examcore.core.constants import RoleLevelEnum
from examcore.core.exceptions import UserNotFound
from examcore.services.hierarchy import RoleHierarchyResolver


@pytest.fixture
def org(make_user):
    """admin; zonal -> regional -> supervisor -> two enumerators; a second, unrelated supervisor team."""
    admin = make_user(RoleLevelEnum.ADMIN)
    zonal = make_user(RoleLevelEnum.ZONAL_OFFICER, parent=admin)
    regional = make_user(RoleLevelEnum.REGIONAL_OFFICER, parent=zonal)
    supervisor = make_user(RoleLevelEnum.SUPERVISOR, parent=regional)
    enum_a = make_user(RoleLevelEnum.ENUMERATOR, parent=supervisor)
    enum_b = make_user(RoleLevelEnum.ENUMERATOR, parent=supervisor)
    other_supervisor = make_user(RoleLevelEnum.SUPERVISOR)
    other_enum = make_user(RoleLevelEnum.ENUMERATOR, parent=other_supervisor)
    return {
        "admin": admin,
        "zonal": zonal,
        "regional": regional,
        "supervisor": supervisor,
        "enum_a": enum_a,
        "enum_b": enum_b,
        "other_supervisor": other_supervisor,
        "other_enum": other_enum,
    }


def test_admin_sees_everyone(db_session: Session, resolver, org):
    visible = resolver.visible_user_ids(db_session, org["admin"].id)
    assert visible == {u.id for u in org.values()}


def test_enumerator_sees_only_self(db_session: Session, resolver, org):
    assert resolver.visible_user_ids(db_session, org["enum_a"].id) == {org["enum_a"].id}


def test_supervisor_sees_own_team(db_session: Session, resolver, org):
    visible = resolver.visible_user_ids(db_session, org["supervisor"].id)
    assert visible == {org["supervisor"].id, org["enum_a"].id, org["enum_b"].id}


def test_zonal_officer_sees_transitive_subtree(db_session: Session, resolver, org):
    visible = resolver.visible_user_ids(db_session, org["zonal"].id)
    assert visible == {
        org["zonal"].id,
        org["regional"].id,
        org["supervisor"].id,
        org["enum_a"].id,
        org["enum_b"].id,
    }
    assert org["other_enum"].id not in visible
    assert org["admin"].id not in visible


def test_visibility_stays_within_subtree(db_session: Session, resolver, org):
    for key in ("zonal", "regional", "supervisor", "enum_a"):
        requester = org[key]
        for user_id in resolver.visible_user_ids(db_session, requester.id) - {requester.id}:
            assert resolver.can_view(db_session, requester.id, user_id)
            # every visible user has the requester on their parent chain
            assert _has_ancestor(db_session, user_id, requester.id)


def test_cycle_in_parent_links_terminates(db_session: Session, resolver, make_user):
    a = make_user(RoleLevelEnum.REGIONAL_OFFICER)
    b = make_user(RoleLevelEnum.SUPERVISOR, parent=a)
    c = make_user(RoleLevelEnum.ENUMERATOR, parent=b)
    a.parent_id = c.id
    db_session.commit()

    visible = resolver.visible_user_ids(db_session, a.id)
    assert visible == {a.id, b.id, c.id}


def test_depth_limit_bounds_the_walk(db_session: Session, make_user):
    top = make_user(RoleLevelEnum.ZONAL_OFFICER)
    parent = top
    chain = []
    for _ in range(4):
        parent = make_user(RoleLevelEnum.ENUMERATOR, parent=parent)
        chain.append(parent)

    shallow = RoleHierarchyResolver(ttl_seconds=0, max_depth=2, supervisor_max_level=4)
    visible = shallow.visible_user_ids(db_session, top.id)
    assert visible == {top.id, chain[0].id, chain[1].id}


def test_unknown_requester_raises(db_session: Session, resolver, org):
    with pytest.raises(UserNotFound):
        resolver.visible_user_ids(db_session, 999999)


def test_snapshot_is_cached_until_invalidated(db_session: Session, make_user):
    cached = RoleHierarchyResolver(ttl_seconds=3600, max_depth=16, supervisor_max_level=4)
    supervisor = make_user(RoleLevelEnum.SUPERVISOR)
    assert cached.visible_user_ids(db_session, supervisor.id) == {supervisor.id}

    new_report = make_user(RoleLevelEnum.ENUMERATOR, parent=supervisor)
    assert cached.visible_user_ids(db_session, supervisor.id) == {supervisor.id}

    cached.invalidate()
    assert cached.visible_user_ids(db_session, supervisor.id) == {supervisor.id, new_report.id}


def test_new_requester_triggers_reload(db_session: Session, make_user):
    cached = RoleHierarchyResolver(ttl_seconds=3600, max_depth=16, supervisor_max_level=4)
    admin = make_user(RoleLevelEnum.ADMIN)
    cached.visible_user_ids(db_session, admin.id)

    late = make_user(RoleLevelEnum.SUPERVISOR)
    assert cached.visible_user_ids(db_session, late.id) == {late.id}


def _has_ancestor(db: Session, user_id: int, ancestor_id: int) -> bool:
    from examcore.models.user import User
    seen = set()
    current = db.get(User, user_id)
    while current is not None and current.parent_id is not None and current.id not in seen:
        seen.add(current.id)
        if current.parent_id == ancestor_id:
            return True
        current = db.get(User, current.parent_id)
    return False
