# File: src/parkhub/application/user_service.py
"""
User Application Service

Accounts that own reservations. Usernames are unique; deleting a user also
deletes the user's reservations so that no reservation references a missing
user.
"""

import logging
from typing import Optional

from ..infrastructure.repositories import UnitOfWork, SearchSpecification
from .dtos import UserCreateDTO, UserDTO, Page, build_page_request
from .exceptions import ModelAlreadyExistsError, ModelNotFoundError, ModelValidationError

SEARCH_FIELDS = ("username", "email", "first_name", "last_name", "full_name")


class UserService:
    """Application service for users"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def _search_filters(search_query: Optional[str], search_field: Optional[str]) -> SearchSpecification:
        """Translate a query on one field into a search specification"""
        if not search_field or not search_query:
            return SearchSpecification()

        field = search_field.strip().lower()
        if field not in SEARCH_FIELDS:
            raise ModelValidationError(
                f"Unknown search field '{search_field}', expected one of {', '.join(SEARCH_FIELDS)}"
            )

        if field != "full_name":
            return SearchSpecification(contains_all={field: search_query})

        words = search_query.split()
        if not words:
            return SearchSpecification()
        if len(words) == 1:
            return SearchSpecification(contains_any={"first_name": words[0], "last_name": words[0]})
        return SearchSpecification(contains_all={"first_name": words[0], "last_name": words[-1]})

    def list_users(
        self,
        page: int = 0,
        size: int = 10,
        sort_direction: str = "asc",
        search_query: Optional[str] = None,
        search_field: Optional[str] = None
    ) -> Page:
        """Page of users sorted by username"""
        request = build_page_request(page, size, sort_direction)
        specification = self._search_filters(search_query, search_field)
        specification.sort_by = ("username",)
        specification.descending = request.descending
        specification.offset = request.offset
        specification.limit = request.size

        with self.uow:
            users = self.uow.users.search(specification)
            total = self.uow.users.count_matching(specification)

        return Page.of([UserDTO.from_model(u) for u in users], total, request.page, request.size)

    def get_user(self, user_id: int) -> Optional[UserDTO]:
        with self.uow:
            user = self.uow.users.get(user_id)
        return UserDTO.from_model(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserDTO]:
        with self.uow:
            user = self.uow.users.find_by_username(username)
        return UserDTO.from_model(user) if user else None

    def create_user(self, request: UserCreateDTO) -> UserDTO:
        self.logger.info(f"Creating user '{request.username}'")

        with self.uow:
            if self.uow.users.exists_by_username(request.username):
                raise ModelAlreadyExistsError(f"User '{request.username}' already exists")

            user = self.uow.users.add(request.to_model())

        self.logger.info(f"Created user {user.id}")
        return UserDTO.from_model(user)

    def update_user(self, user_id: int, request: UserCreateDTO) -> UserDTO:
        with self.uow:
            if not self.uow.users.exists(user_id):
                raise ModelNotFoundError(f"User {user_id} not found")

            clash = self.uow.users.find_by_username(request.username)
            if clash and clash.id != user_id:
                raise ModelAlreadyExistsError(f"User '{request.username}' already exists")

            user = request.to_model()
            user.id = user_id
            user = self.uow.users.update(user)

        self.logger.info(f"Updated user {user_id}")
        return UserDTO.from_model(user)

    def delete_user(self, user_id: int) -> None:
        """Delete a user together with the user's reservations"""
        with self.uow:
            if not self.uow.users.exists(user_id):
                raise ModelNotFoundError(f"User {user_id} not found")

            reservations = self.uow.reservations.find_by_user(user_id)
            for reservation in reservations:
                self.uow.reservations.delete(reservation.id)

            self.uow.users.delete(user_id)

        self.logger.info(f"Deleted user {user_id} and {len(reservations)} reservations")
