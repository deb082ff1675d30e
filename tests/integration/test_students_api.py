"""
Integration tests for Student, Course, Enrollment and Rating APIs

Tests the REST endpoints end to end through TestClient against a temporary
SQLite database.
"""
import pytest

from app.services.record_store import RecordStore, RecordStoreError


@pytest.fixture(scope="function")
def seeded(client):
    """Ivan (1 perfect course), Mariia (2 courses), Oleh (no courses)"""
    ids = {}
    for name, surname in [("Ivan", "Ivanenko"), ("Mariia", "Petriv"), ("Oleh", "Sydorenko")]:
        response = client.post("/api/v1/students", json={"name": name, "surname": surname})
        assert response.status_code == 200
        ids[name] = response.json()["id"]

    for course in ["Mathematics", "Physics"]:
        response = client.post("/api/v1/courses", json={"name": course})
        assert response.status_code == 200
        ids[course] = response.json()["id"]

    facts = [
        ("Ivan", "Mathematics", 100, 10, 10),
        ("Mariia", "Mathematics", 80, 8, 10),
        ("Mariia", "Physics", 90, 9, 10),
    ]
    for student, course, grade, attended, total in facts:
        response = client.post("/api/v1/grades", json={
            "student_id": ids[student], "course_id": ids[course], "grade": grade
        })
        assert response.status_code == 200
        response = client.post("/api/v1/attendance", json={
            "student_id": ids[student], "course_id": ids[course], "attended": attended, "total": total
        })
        assert response.status_code == 200

    return ids


class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Student Records API"


class TestStudentsAPI:
    """Student CRUD and aggregated records"""

    def test_list_students_sorted(self, client, seeded):
        response = client.get("/api/v1/students", params={"sort": "surname"})

        assert response.status_code == 200
        assert [s["surname"] for s in response.json()] == ["Ivanenko", "Petriv", "Sydorenko"]

    def test_list_students_invalid_sort(self, client, seeded):
        response = client.get("/api/v1/students", params={"sort": "attendance"})

        assert response.status_code == 200
        assert [s["name"] for s in response.json()] == ["Ivan", "Mariia", "Oleh"]

    def test_create_student_validation(self, client):
        response = client.post("/api/v1/students", json={"name": "", "surname": "Ivanenko"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_full_records_with_ratings(self, client, seeded):
        response = client.get("/api/v1/students/full")

        assert response.status_code == 200
        data = response.json()
        assert [s["name"] for s in data] == ["Ivan", "Mariia", "Oleh"]
        assert [s["rating"] for s in data] == [301, 406, 0]
        assert data[2]["courses"] == []
        assert data[1]["courses"][1] == {
            "course_id": seeded["Physics"],
            "course_name": "Physics",
            "grade": 90,
            "attended": 9,
            "total": 10,
        }

    def test_single_full_record(self, client, seeded):
        response = client.get(f"/api/v1/students/{seeded['Ivan']}/full")

        assert response.status_code == 200
        assert response.json()["rating"] == 301
        assert len(response.json()["courses"]) == 1

    def test_single_full_record_not_found(self, client):
        response = client.get("/api/v1/students/999/full")

        assert response.status_code == 404

    def test_get_and_update_student(self, client, seeded):
        response = client.put(
            f"/api/v1/students/{seeded['Oleh']}", json={"name": "Oleh", "surname": "Shevchenko"}
        )
        assert response.status_code == 200

        response = client.get(f"/api/v1/students/{seeded['Oleh']}")
        assert response.json() == {"id": seeded["Oleh"], "name": "Oleh", "surname": "Shevchenko"}

    def test_update_missing_student(self, client):
        response = client.put("/api/v1/students/999", json={"name": "A", "surname": "B"})

        assert response.status_code == 404

    def test_delete_student(self, client, seeded):
        response = client.delete(f"/api/v1/students/{seeded['Mariia']}")
        assert response.status_code == 200

        assert client.get(f"/api/v1/students/{seeded['Mariia']}").status_code == 404
        courses = client.get("/api/v1/courses/full").json()
        assert [c["student_count"] for c in courses] == [1, 0]

    def test_replace_student_record(self, client, seeded):
        response = client.put(f"/api/v1/students/{seeded['Oleh']}/record", json={
            "name": "Oleh",
            "surname": "Sydorenko",
            "courses": [
                {"course_id": seeded["Physics"], "grade": None, "attended": 5, "total": 10},
            ],
        })

        assert response.status_code == 200
        assert response.json()["rating"] == 75
        assert response.json()["courses"][0]["grade"] is None

    def test_replace_record_unknown_course(self, client, seeded):
        """A failed save leaves names, grades and attendance untouched"""
        response = client.put(f"/api/v1/students/{seeded['Mariia']}/record", json={
            "name": "Maria",
            "surname": "Kovalenko",
            "courses": [
                {"course_id": seeded["Physics"], "grade": 60, "attended": 1, "total": 10},
                {"course_id": 999, "grade": 50, "attended": 0, "total": 0},
            ],
        })

        assert response.status_code == 404
        assert response.json()["detail"] == "Course 999 not found"

        record = client.get(f"/api/v1/students/{seeded['Mariia']}/full").json()
        assert record["name"] == "Mariia"
        assert record["surname"] == "Petriv"
        assert [c["grade"] for c in record["courses"]] == [80, 90]
        assert [c["attended"] for c in record["courses"]] == [8, 9]
        assert record["rating"] == 406

    def test_fractional_grade(self, client, seeded):
        response = client.post("/api/v1/grades", json={
            "student_id": seeded["Oleh"], "course_id": seeded["Physics"], "grade": 87.5
        })
        assert response.status_code == 200
        response = client.post("/api/v1/attendance", json={
            "student_id": seeded["Oleh"], "course_id": seeded["Physics"], "attended": 10, "total": 10
        })
        assert response.status_code == 200

        record = client.get(f"/api/v1/students/{seeded['Oleh']}/full").json()
        assert record["courses"][0]["grade"] == 87.5
        assert record["rating"] == 282
        assert client.get("/api/v1/rating").status_code == 200

    def test_store_failure_returns_500(self, client, seeded, monkeypatch):
        async def failing_fetch(self, student_id=None):
            raise RecordStoreError("database is locked")

        monkeypatch.setattr(RecordStore, "fetch_student_rows", failing_fetch)

        response = client.get("/api/v1/students/full")
        assert response.status_code == 500
        assert "Failed to load student records" in response.json()["detail"]
        assert "database is locked" in response.json()["detail"]

        assert client.get(f"/api/v1/students/{seeded['Ivan']}/full").status_code == 500
        assert client.get("/api/v1/rating").status_code == 500

    def test_delete_grades_and_attendance(self, client, seeded):
        assert client.delete(f"/api/v1/students/{seeded['Mariia']}/grades").json() == {"deleted": 2}
        assert client.delete(f"/api/v1/students/{seeded['Mariia']}/attendance").json() == {"deleted": 2}

        record = client.get(f"/api/v1/students/{seeded['Mariia']}/full").json()
        assert record["courses"] == []
        assert record["rating"] == 0

    def test_negative_attendance_rejected(self, client, seeded):
        response = client.post("/api/v1/attendance", json={
            "student_id": seeded["Ivan"], "course_id": seeded["Physics"], "attended": -1, "total": 10
        })

        assert response.status_code == 422

    def test_grade_for_missing_student(self, client, seeded):
        response = client.post("/api/v1/grades", json={
            "student_id": 999, "course_id": seeded["Physics"], "grade": 50
        })

        assert response.status_code == 404


class TestCoursesAPI:
    """Course listing and enrollment"""

    def test_course_summaries(self, client, seeded):
        response = client.get("/api/v1/courses/full")

        assert response.status_code == 200
        assert response.json() == [
            {"id": seeded["Mathematics"], "name": "Mathematics", "student_count": 2},
            {"id": seeded["Physics"], "name": "Physics", "student_count": 1},
        ]

    def test_list_courses(self, client, seeded):
        response = client.get("/api/v1/courses")

        assert [c["name"] for c in response.json()] == ["Mathematics", "Physics"]

    def test_add_student_to_course(self, client, seeded):
        response = client.post("/api/v1/courses/add-student", json={
            "student_id": seeded["Oleh"],
            "course_id": seeded["Physics"],
            "grade": None,
            "attended": 0,
            "total": 0,
        })
        assert response.status_code == 200

        students = client.get(f"/api/v1/courses/{seeded['Physics']}/students").json()
        assert [s["surname"] for s in students] == ["Petriv", "Sydorenko"]

        record = client.get(f"/api/v1/students/{seeded['Oleh']}/full").json()
        assert len(record["courses"]) == 1
        assert record["courses"][0]["grade"] is None
        assert record["rating"] == 0

    def test_remove_student_from_course(self, client, seeded):
        response = client.delete(f"/api/v1/students/{seeded['Mariia']}/courses/{seeded['Mathematics']}")
        assert response.status_code == 200

        students = client.get(f"/api/v1/courses/{seeded['Mathematics']}/students").json()
        assert [s["name"] for s in students] == ["Ivan"]

    def test_delete_course(self, client, seeded):
        response = client.delete(f"/api/v1/courses/{seeded['Mathematics']}")
        assert response.status_code == 200

        records = client.get("/api/v1/students/full").json()
        assert records[0]["courses"] == []
        assert [c["course_name"] for c in records[1]["courses"]] == ["Physics"]

    def test_delete_missing_course(self, client):
        assert client.delete("/api/v1/courses/999").status_code == 404

    def test_students_of_missing_course(self, client):
        assert client.get("/api/v1/courses/999/students").status_code == 404


class TestRatingAPI:
    """Leaderboard"""

    def test_rating_sorted_highest_first(self, client, seeded):
        response = client.get("/api/v1/rating")

        assert response.status_code == 200
        body = response.json()
        assert [s["name"] for s in body["data"]] == ["Mariia", "Ivan", "Oleh"]
        assert [s["rating"] for s in body["data"]] == [406, 301, 0]
        assert body["metadata"]["total_students"] == 3

    def test_rating_empty(self, client):
        response = client.get("/api/v1/rating")

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_rating_formula(self, client):
        response = client.get("/api/v1/rating/formula")

        assert response.json() == {
            "grade_weight": 0.5,
            "attendance_weight": 0.5,
            "scale": 10,
            "max_rating": 1000,
        }
