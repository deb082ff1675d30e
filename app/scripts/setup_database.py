"""
Database Setup Script

Creates the student records tables and seeds them with sample data.
Usage: python -m app.scripts.setup_database [--fake 50] [--reset]
"""
import asyncio
import argparse
import random
from sqlalchemy import text
from faker import Faker

from app.database import AsyncSessionLocal, init_db
from app.models.student import Student
from app.models.course import Course
from app.models.grade import Grade
from app.models.attendance import Attendance

fake = Faker()

SAMPLE_STUDENTS = [
    ("Ivan", "Ivanenko"),
    ("Mariia", "Petriv"),
    ("Oleh", "Sydorenko"),
]

SAMPLE_COURSES = [
    "Mathematics",
    "Physics",
    "Programming",
    "History",
    "English",
]

# Sample enrollments: (student index, course index, grade, attended, total)
SAMPLE_ENROLLMENTS = [
    (0, 0, 95, 18, 20),
    (0, 2, 88, 20, 20),
    (0, 3, 80, 15, 20),
    (1, 0, 82, 17, 20),
    (1, 1, 90, 19, 20),
    (2, 2, 65, 12, 20),
    (2, 4, None, 8, 20),
]


async def clear_data():
    """Delete all rows from the student records tables"""
    async with AsyncSessionLocal() as session:
        for table in ["grades", "attendance", "students", "courses"]:
            await session.execute(text(f"DELETE FROM {table}"))
        await session.commit()
    print("✓ Cleared existing data")


async def seed_sample_data():
    """Seed the fixed sample students, courses, grades and attendance"""
    async with AsyncSessionLocal() as session:
        students = [Student(name=name, surname=surname) for name, surname in SAMPLE_STUDENTS]
        courses = [Course(name=name) for name in SAMPLE_COURSES]
        session.add_all(students + courses)
        await session.flush()

        for student_idx, course_idx, grade, attended, total in SAMPLE_ENROLLMENTS:
            student_id = students[student_idx].id
            course_id = courses[course_idx].id
            session.add(Grade(student_id=student_id, course_id=course_id, grade=grade))
            session.add(Attendance(student_id=student_id, course_id=course_id, attended=attended, total=total))

        await session.commit()

    print(f"  Created {len(SAMPLE_STUDENTS)} students, {len(SAMPLE_COURSES)} courses, "
          f"{len(SAMPLE_ENROLLMENTS)} enrollments")


async def seed_fake_data(student_count: int, seed: int):
    """
    Seed randomly generated students with Faker.

    Each student is enrolled in 0-4 courses; some grades are left empty and
    some courses have no tracked attendance.

    Args:
        student_count: Number of students to create
        seed: Random seed for reproducible data
    """
    random.seed(seed)
    Faker.seed(seed)

    async with AsyncSessionLocal() as session:
        courses = [Course(name=name) for name in SAMPLE_COURSES]
        students = [Student(name=fake.first_name(), surname=fake.last_name()) for _ in range(student_count)]
        session.add_all(courses + students)
        await session.flush()

        enrollment_count = 0
        for student in students:
            for course in random.sample(courses, k=random.randint(0, 4)):
                grade = random.randint(40, 100) if random.random() < 0.85 else None
                total = random.choice([0, 10, 16, 20])
                attended = random.randint(0, total) if total else 0
                session.add(Grade(student_id=student.id, course_id=course.id, grade=grade))
                session.add(Attendance(student_id=student.id, course_id=course.id, attended=attended, total=total))
                enrollment_count += 1

        await session.commit()

    print(f"  Created {student_count} students, {len(SAMPLE_COURSES)} courses, "
          f"{enrollment_count} enrollments")


async def setup_database(fake_count: int, reset: bool, seed: int):
    await init_db()
    print("✓ Tables created")

    if reset:
        await clear_data()

    if fake_count:
        await seed_fake_data(fake_count, seed)
    else:
        await seed_sample_data()

    print("\n✅ Database is ready")


def main():
    """CLI entry point"""
    parser = argparse.ArgumentParser(description="Create and seed the student records database")
    parser.add_argument(
        "--fake",
        "-f",
        type=int,
        default=0,
        help="Generate N random students instead of the fixed sample"
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete existing rows before seeding"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for --fake (default: 42)"
    )

    args = parser.parse_args()

    asyncio.run(setup_database(args.fake, args.reset, args.seed))


if __name__ == "__main__":
    main()
