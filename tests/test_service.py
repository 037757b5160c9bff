"""Tests for the user service and its audit trail."""

from __future__ import annotations

import unittest
from datetime import date, datetime, timezone

from usermanagement.database import InMemoryDataContext
from usermanagement.models import User
from usermanagement.service import UserNotFoundError, UserService


def _population() -> list[User]:
    return [
        User(forename="Ada", surname="Active", email="ada@example.com", is_active=True),
        User(forename="Ian", surname="Idle", email="ian@example.com", is_active=False),
        User(forename="Amy", surname="Active", email="amy@example.com", is_active=True),
        User(forename="Ivy", surname="Idle", email="ivy@example.com", is_active=False),
    ]


class UserServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.data = InMemoryDataContext(seed=_population())
        self.service = UserService(self.data)

    def test_get_all_returns_every_user(self) -> None:
        self.assertEqual(len(self.service.get_all()), 4)

    def test_filter_by_active_partitions_population(self) -> None:
        active = self.service.filter_by_active(True)
        inactive = self.service.filter_by_active(False)

        self.assertTrue(all(user.is_active for user in active))
        self.assertTrue(all(not user.is_active for user in inactive))
        active_ids = {user.id for user in active}
        inactive_ids = {user.id for user in inactive}
        self.assertFalse(active_ids & inactive_ids)
        self.assertEqual(active_ids | inactive_ids, {user.id for user in self.service.get_all()})

    def test_filter_by_active_with_no_matches_is_empty(self) -> None:
        service = UserService(InMemoryDataContext(seed=[_population()[0]]))
        self.assertEqual(service.filter_by_active(False), [])

    def test_get_by_id_missing_user_raises(self) -> None:
        with self.assertRaises(UserNotFoundError) as ctx:
            self.service.get_by_id(404)

        self.assertEqual(str(ctx.exception), "User with ID 404 not found.")
        self.assertEqual(ctx.exception.user_id, 404)
        self.assertIsInstance(ctx.exception, LookupError)

    def test_create_new_user_scenario(self) -> None:
        user = User(
            forename="New",
            surname="User",
            email="newuser@example.com",
            date_of_birth=date(1990, 1, 1),
            is_active=True,
        )
        before = datetime.now(timezone.utc)
        self.service.create(user)
        after = datetime.now(timezone.utc)

        matches = [u for u in self.service.get_all() if u.email == "newuser@example.com"]
        self.assertEqual(len(matches), 1)
        self.assertEqual(matches[0].id, user.id)

        logs = self.service.get_all_logs()
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0].user_id, user.id)
        self.assertEqual(logs[0].action, "Created")
        self.assertEqual(logs[0].details, f"User with {user.id} has been created")
        self.assertTrue(before <= logs[0].timestamp <= after)

    def test_update_overwrites_fields_and_logs(self) -> None:
        user = self.service.get_by_id(2)
        user.forename = "Ivan"
        user.is_active = True
        self.service.update(user)

        stored = self.service.get_by_id(2)
        self.assertEqual(stored.forename, "Ivan")
        self.assertTrue(stored.is_active)

        logs = self.service.get_logs_for_user(2)
        self.assertEqual([log.action for log in logs], ["Updated"])

    def test_update_unknown_user_raises_without_logging(self) -> None:
        ghost = User(id=77, forename="No", surname="Body", email="nobody@example.com")
        with self.assertRaises(UserNotFoundError):
            self.service.update(ghost)
        self.assertEqual(self.service.get_all_logs(), [])

    def test_delete_removes_user_and_keeps_logs(self) -> None:
        self.service.delete(1)

        self.assertNotIn(1, {user.id for user in self.service.get_all()})
        with self.assertRaises(UserNotFoundError):
            self.service.get_by_id(1)

        logs = self.service.get_logs_for_user(1)
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0].action, "Deleted")
        self.assertEqual(logs[0].details, "User with 1 has been deleted")

    def test_delete_missing_user_raises_without_logging(self) -> None:
        with self.assertRaises(UserNotFoundError) as ctx:
            self.service.delete(999)

        self.assertEqual(ctx.exception.message, "User with ID 999 not found.")
        self.assertEqual(self.service.get_all_logs(), [])

    def test_each_mutation_writes_exactly_one_log(self) -> None:
        user = User(forename="Log", surname="Me", email="logme@example.com")
        self.service.create(user)
        user.surname = "Again"
        self.service.update(user)
        self.service.delete(user.id)

        logs = self.service.get_logs_for_user(user.id)
        self.assertEqual([log.action for log in logs], ["Created", "Updated", "Deleted"])
        self.assertEqual([log.id for log in logs], sorted(log.id for log in logs))

    def test_create_log_passes_through(self) -> None:
        log = self.service.create_log(3, "Viewed", "Profile opened")

        self.assertEqual(self.service.get_all_logs(), [log])
        self.assertEqual(self.service.get_logs_for_user(3), [log])
        self.assertEqual(self.service.get_logs_for_user(4), [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
