# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#


class StorageError(Exception):
    """Base class for rule violations reported by a storage backend."""


class StorageNotConnectedError(StorageError):
    def __init__(self):
        super().__init__("Database not connected")


class DuplicateUserError(StorageError):
    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"A user with {field} '{value}' already exists")


class DuplicateApplicationError(StorageError):
    def __init__(self, volunteer_id: int, opportunity_id: int):
        self.volunteer_id = volunteer_id
        self.opportunity_id = opportunity_id
        super().__init__(
            f"Volunteer {volunteer_id} has already applied for opportunity {opportunity_id}"
        )


class UnknownReferenceError(StorageError):
    def __init__(self, entity: str, entity_id: int, reason: str = "not found"):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} {reason}")


class InvalidStatusTransitionError(StorageError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change application status from '{current}' to '{requested}'")
