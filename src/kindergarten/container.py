from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .authorization.mysql_authorization_repository import MySQLAuthorizationRepository
from .authorization.service import AuthorizationService
from .chat.mysql_chat_repository import MySQLChatMessageRepository, MySQLConversationRepository
from .chat.service import ChatService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.service import ClassService
from .database.connection import DBConfig, DatabaseConnection
from .parents.mysql_parent_repository import MySQLParentRepository
from .parents.service import ParentService
from .physical.mysql_physical_repository import MySQLPhysicalDevelopmentRepository
from .physical.service import PhysicalDevelopmentService
from .posts.mysql_comment_repository import MySQLCommentRepository
from .posts.mysql_post_repository import MySQLPostRepository
from .posts.service import PostService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    auth_service: AuthService
    authorization_service: AuthorizationService
    user_service: UserService
    parent_service: ParentService
    student_service: StudentService
    class_service: ClassService
    attendance_service: AttendanceService
    post_service: PostService
    physical_service: PhysicalDevelopmentService
    chat_service: ChatService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    parents_repo = MySQLParentRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    classes_repo = MySQLClassRepository(conn)

    auth_service = AuthService(users_repo)

    return Container(
        conn=conn,
        auth_service=auth_service,
        authorization_service=AuthorizationService(auth_service, MySQLAuthorizationRepository(conn)),
        user_service=UserService(users_repo, parents_repo),
        parent_service=ParentService(parents_repo, users_repo, students_repo),
        student_service=StudentService(students_repo),
        class_service=ClassService(classes_repo, users_repo),
        attendance_service=AttendanceService(
            MySQLAttendanceRepository(conn),
            students_repo,
            strategy_factory=AttendanceStrategyFactory(),
        ),
        post_service=PostService(MySQLPostRepository(conn), MySQLCommentRepository(conn), classes_repo),
        physical_service=PhysicalDevelopmentService(MySQLPhysicalDevelopmentRepository(conn)),
        chat_service=ChatService(
            MySQLConversationRepository(conn),
            MySQLChatMessageRepository(conn),
            users_repo,
        ),
    )
