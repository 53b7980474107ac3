import threading

import pytest
from sqlalchemy.orm import Session, sessionmaker

from examcore.core.constants import RoleLevelEnum, SessionStatusEnum
from examcore.core.database import Base, build_engine
from examcore.core.exceptions import SessionNotActive
from examcore.models.test_result import TestResult as ResultRow
from examcore.models.test_session import TestSession as SessionRow


@pytest.fixture(scope="function")
def database_engine(tmp_path):
    # Threads need their own connections, so use a file database instead of the shared in-memory one
    engine = build_engine(f"sqlite:///{tmp_path / 'concurrency.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


def _run_together(*targets):
    barrier = threading.Barrier(len(targets))
    outcomes = [None] * len(targets)

    def runner(index, target):
        barrier.wait()
        try:
            outcomes[index] = target()
        except Exception as e:
            outcomes[index] = e

    threads = [threading.Thread(target=runner, args=(i, t)) for i, t in enumerate(targets)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


def _in_own_session(engine, fn):
    def target():
        db = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
        try:
            return fn(db)
        finally:
            db.close()
    return target


def test_complete_racing_the_timeout_sweep_scores_once(
    database_engine, db_session: Session, session_service, clock, make_user, make_survey
):
    candidate = make_user(RoleLevelEnum.ENUMERATOR)
    survey = make_survey(duration=5)
    session_id = session_service.start(db_session, candidate.id, survey.id).id
    db_session.commit()
    clock.advance(minutes=6)

    outcomes = _run_together(
        _in_own_session(database_engine, lambda db: session_service.complete(db, session_id).id),
        _in_own_session(database_engine, lambda db: session_service.expire_timeout(db, session_id).status),
    )

    completed, expired = outcomes
    assert expired == SessionStatusEnum.TIMEOUT
    assert isinstance(completed, (int, SessionNotActive))

    db_session.expire_all()
    assert db_session.query(ResultRow).filter(ResultRow.session_id == session_id).count() == 1
    assert db_session.get(SessionRow, session_id).status == SessionStatusEnum.TIMEOUT


def test_parallel_starts_share_one_session(
    database_engine, db_session: Session, session_service, make_user, make_survey
):
    candidate_id = make_user(RoleLevelEnum.ENUMERATOR).id
    survey_id = make_survey().id
    db_session.commit()

    outcomes = _run_together(*[
        _in_own_session(database_engine, lambda db: session_service.start(db, candidate_id, survey_id).id)
        for _ in range(4)
    ])

    assert all(isinstance(o, int) for o in outcomes), outcomes
    assert len(set(outcomes)) == 1
    db_session.expire_all()
    assert db_session.query(SessionRow).count() == 1
