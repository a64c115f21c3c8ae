"""Administrative commands.

Usage:
    codepractice-manage init-db
    codepractice-manage create-admin --username admin --email admin@example.com --password ...
    codepractice-manage make-admin someone@example.com
    codepractice-manage seed
"""
import argparse
import logging
import sys

from sqlmodel import Session

from codepractice import storage
from codepractice.auth import AuthGate
from codepractice.config import Settings
from codepractice.db import init_db, make_engine
from codepractice.errors import Conflict
from codepractice.main import configure_logging
from codepractice.models import Question, Role

logger = logging.getLogger(__name__)

SAMPLE_QUESTIONS = [
    {
        "title": "Two Sum",
        "description": "Given an array of integers nums and an integer target, return indices of the two numbers such that they add up to target.",
        "type": "coding",
        "difficulty": "easy",
        "starter_code": "def two_sum(nums, target):\n    # Your code here\n    return []\n",
        "test_cases": [
            {"input": "[2,7,11,15], 9", "expectedOutput": "[0,1]"},
            {"input": "[3,2,4], 6", "expectedOutput": "[1,2]"},
            {"input": "[3,3], 6", "expectedOutput": "[0,1]"},
        ],
        "topics": ["Array", "Hash Table"],
    },
    {
        "title": "Palindrome Number",
        "description": "Given an integer x, return true if x is a palindrome integer.",
        "type": "coding",
        "difficulty": "easy",
        "starter_code": "def is_palindrome(x):\n    # Your code here\n    return False\n",
        "test_cases": [
            {"input": "121", "expectedOutput": "true"},
            {"input": "-121", "expectedOutput": "false"},
            {"input": "10", "expectedOutput": "false"},
        ],
        "topics": ["Math"],
    },
    {
        "title": "Add Two Numbers",
        "description": "You are given two non-empty linked lists representing two non-negative integers. Add the two numbers and return the sum as a linked list.",
        "type": "coding",
        "difficulty": "medium",
        "starter_code": "def add_two_numbers(l1, l2):\n    # Your code here\n    return None\n",
        "test_cases": [
            {"input": "[2,4,3], [5,6,4]", "expectedOutput": "[7,0,8]"},
            {"input": "[0], [0]", "expectedOutput": "[0]"},
            {"input": "[9,9,9,9,9,9,9], [9,9,9,9]", "expectedOutput": "[8,9,9,9,0,0,0,1]"},
        ],
        "topics": ["Linked List", "Math", "Recursion"],
    },
    {
        "title": "JavaScript Basics",
        "description": "What is the output of console.log(typeof null)?",
        "type": "mcq",
        "difficulty": "easy",
        "options": ["null", "undefined", "object", "boolean"],
        "correct_answer": "object",
        "topics": ["JavaScript"],
    },
    {
        "title": "Array Methods",
        "description": "Which array method creates a new array with all elements that pass a test implemented by the provided function?",
        "type": "mcq",
        "difficulty": "medium",
        "options": ["map()", "filter()", "reduce()", "forEach()"],
        "correct_answer": "filter()",
        "topics": ["JavaScript", "Arrays"],
    },
]


def create_admin(session: Session, gate: AuthGate, username: str, email: str, password: str) -> int:
    try:
        result = gate.register(session, username, email, password, role=Role.admin)
    except Conflict:
        logger.error("A user with username %s or email %s already exists", username, email)
        return 1
    logger.info("Admin user %s <%s> created", result.user.username, result.user.email)
    return 0


def make_admin(session: Session, email: str) -> int:
    user = storage.get_user_by_email(session, email)
    if not user:
        logger.error("User with email %s not found", email)
        return 1
    if user.role == Role.admin:
        logger.info("User %s is already an admin", email)
        return 0
    user.role = Role.admin
    session.add(user)
    session.commit()
    logger.info("User %s promoted to admin", email)
    return 0


def seed(session: Session) -> int:
    existing = {q.title for q in storage.list_questions(session)}
    added = 0
    for data in SAMPLE_QUESTIONS:
        if data["title"] in existing:
            continue
        session.add(Question(**data))
        added += 1
    session.commit()
    logger.info("Seeded %d sample questions (%d already present)", added, len(SAMPLE_QUESTIONS) - added)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codepractice-manage", description=__doc__.splitlines()[0])
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create the database tables")

    p = sub.add_parser("create-admin", help="register a new admin account")
    p.add_argument("--username", default="admin")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)

    p = sub.add_parser("make-admin", help="promote an existing user to admin")
    p.add_argument("email")

    sub.add_parser("seed", help="insert sample questions")
    return parser


def main(argv=None, settings: Settings = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    engine = make_engine(settings.database_url)
    init_db(engine)
    if args.command == "init-db":
        logger.info("Tables created")
        return 0

    gate = AuthGate(settings.secret_key, settings.algorithm, settings.access_token_expire_minutes)
    with Session(engine) as session:
        if args.command == "create-admin":
            return create_admin(session, gate, args.username, args.email, args.password)
        if args.command == "make-admin":
            return make_admin(session, args.email)
        return seed(session)


if __name__ == "__main__":
    sys.exit(main())
