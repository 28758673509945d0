from typing import Dict, List, Optional

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskboard.config import settings
from taskboard.database import Base, get_db
from taskboard.main import app
from taskboard.models import Board, BoardColumn, MemberRole, Task, User
from taskboard.schemas import BoardCreate, ColumnCreate, MemberIn, TaskCreate
from taskboard.services import boards as board_service
from taskboard.services import columns as column_service
from taskboard.services import tasks as task_service

TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def db_session() -> Session:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def _add_user(session: Session, user_id: str, email: str) -> User:
    user = User(id=user_id, email=email, first_name=user_id.capitalize())
    session.add(user)
    session.commit()
    return user


USER_NAMES = ("owner", "admin", "editor", "viewer", "outsider")


def seed_users(session: Session) -> Dict[str, User]:
    return {name: _add_user(session, name, f"{name}@example.com") for name in USER_NAMES}


@pytest.fixture
def users(db_session: Session) -> Dict[str, User]:
    return seed_users(db_session)


class BoardFixture:
    """A seeded board with lookups by column name and task title."""

    def __init__(self, session: Session, board_id: str):
        self.session = session
        self.board_id = board_id
        self.columns: Dict[str, str] = {}
        self.tasks: Dict[str, str] = {}

    @property
    def board(self) -> Board:
        self.session.expire_all()
        return self.session.query(Board).filter(Board.id == self.board_id).one()

    def column(self, name: str) -> BoardColumn:
        self.session.expire_all()
        return self.session.query(BoardColumn).filter(BoardColumn.id == self.columns[name]).one()

    def task(self, title: str) -> Task:
        self.session.expire_all()
        return self.session.query(Task).filter(Task.id == self.tasks[title]).one()

    def column_names(self) -> List[str]:
        by_id = {column_id: name for name, column_id in self.columns.items()}
        return [by_id[column_id] for column_id in self.board.column_order]

    def task_titles(self, column_name: str) -> List[str]:
        by_id = {task_id: title for title, task_id in self.tasks.items()}
        return [by_id[task_id] for task_id in self.column(column_name).task_order]


def seed_board(
    session: Session,
    users: Dict[str, User],
    layout: Dict[str, List[str]],
    name: str = "Sprint",
    owner: Optional[User] = None,
) -> BoardFixture:
    """Create a board owned by ``owner`` with admin/editor/viewer members.

    ``layout`` maps column names to task titles, in display order.
    """
    owner = owner or users["owner"]
    board = board_service.create_board(
        session,
        BoardCreate(
            name=name,
            members=[
                MemberIn(user=users["admin"].id, role=MemberRole.ADMIN),
                MemberIn(user=users["editor"].id, role=MemberRole.EDITOR),
                MemberIn(user=users["viewer"].id, role=MemberRole.VIEWER),
            ],
        ),
        owner.id,
    )
    seeded = BoardFixture(session, board.id)
    for column_name, titles in layout.items():
        column = column_service.create_column(session, board.id, ColumnCreate(name=column_name), owner.id)
        seeded.columns[column_name] = column.id
        for title in titles:
            task = task_service.create_task(session, column.id, TaskCreate(title=title), owner.id)
            seeded.tasks[title] = task.id
    return seeded


@pytest.fixture
def make_board(db_session: Session, users: Dict[str, User]):
    def _make(layout: Dict[str, List[str]], name: str = "Sprint", owner: Optional[User] = None) -> BoardFixture:
        return seed_board(db_session, users, layout, name, owner)

    return _make


@pytest.fixture
def file_sessions(tmp_path):
    """Two sessions on separate connections to one SQLite file.

    The second session plays a concurrent writer that commits while the first
    is in the middle of a unit of work.
    """
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'board.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    session, other = factory(), factory()
    try:
        yield session, other
    finally:
        session.close()
        other.close()
        file_engine.dispose()


def make_token(user: User, **claims) -> str:
    payload = {"sub": user.id, "email": user.email}
    payload.update(claims)
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user)}"}


@pytest.fixture
def client(db_session: Session) -> TestClient:
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
