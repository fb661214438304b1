# File: src/parkhub/infrastructure/rental_gateway.py
"""
HTTP gateway to the partner rental service

Endpoints used:
- GET  /cars?page&size&sort        -> {"content": [car, ...]} (or a bare list)
- POST /customers/external {email} -> 200/201 created, 409 already exists
- POST /rentals {carId, startAt, endAt} with ``Authorization: Bearer <email>``

Only the car listing is retried. Writes fail on the first transport fault or
non-success status.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import ValidationError as PydanticValidationError

from ..application.dtos import CarDTO
from ..application.exceptions import UpstreamServiceError
from ..config import PartnerServiceConfig

CUSTOMER_OK_STATUSES = (200, 201, 409)
RENTAL_OK_STATUSES = (200, 201)


class RentalPartnerGateway:
    """Blocking client for the partner rental service"""

    def __init__(self, config: PartnerServiceConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.logger = logging.getLogger(self.__class__.__name__)

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def fetch_all_cars(self) -> List[CarDTO]:
        """
        Fetch every car the partner lists, in one oversized page.

        Each transport fault, 5xx status or unparseable body is logged and
        retried immediately, up to ``max_search_attempts`` attempts in total.
        A 4xx status or a car record that fails validation will not change on
        a retry and fails at once.
        """
        attempts = self.config.max_search_attempts
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                cars = self._fetch_cars_once()
                self.logger.debug(f"Fetched {len(cars)} cars on attempt {attempt}")
                return cars
            except requests.HTTPError as e:
                status_code = getattr(e.response, "status_code", None)
                if status_code is not None and 400 <= status_code < 500:
                    self.logger.error(f"Car search rejected with status {status_code}: {e}")
                    raise UpstreamServiceError(
                        f"Partner car search rejected: {e}", status_code=status_code
                    ) from e
                last_error = e
                self.logger.warning(f"Car search attempt {attempt}/{attempts} failed: {e}")
            except PydanticValidationError as e:
                self.logger.error(f"Partner returned an invalid car record: {e}")
                raise UpstreamServiceError(f"Partner returned an invalid car record: {e}") from e
            except (requests.RequestException, ValueError) as e:
                last_error = e
                self.logger.warning(f"Car search attempt {attempt}/{attempts} failed: {e}")

        self.logger.error(f"Car search failed after {attempts} attempts")
        status_code = getattr(getattr(last_error, 'response', None), 'status_code', None)
        raise UpstreamServiceError(
            f"Partner car search failed after {attempts} attempts: {last_error}",
            status_code=status_code
        ) from last_error

    def _fetch_cars_once(self) -> List[CarDTO]:
        response = self.session.get(
            self._url("/cars"),
            params={"page": 1, "size": self.config.search_page_size, "sort": "asc"},
            timeout=self.config.timeout_seconds
        )
        response.raise_for_status()

        payload = response.json()
        items = payload.get("content", []) if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise ValueError("Unexpected car listing payload")

        return [CarDTO.model_validate(item) for item in items]

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def _post(self, path: str, body: Dict[str, Any], headers: Optional[Dict[str, str]] = None):
        try:
            return self.session.post(
                self._url(path),
                json=body,
                headers=headers,
                timeout=self.config.timeout_seconds
            )
        except requests.RequestException as e:
            self.logger.error(f"Partner request POST {path} failed: {e}")
            raise UpstreamServiceError(f"Partner service unreachable: {e}") from e

    def ensure_customer(self, email: str) -> bool:
        """
        Register the customer with the partner.

        Returns True when the customer was created, False when it already
        existed.
        """
        response = self._post("/customers/external", {"email": email})

        if response.status_code not in CUSTOMER_OK_STATUSES:
            raise UpstreamServiceError(
                f"Partner rejected customer registration with status {response.status_code}",
                status_code=response.status_code
            )

        created = response.status_code != 409
        self.logger.info(f"Partner customer {email} {'created' if created else 'already exists'}")
        return created

    def create_rental(
        self,
        email: str,
        car_id: Union[int, str],
        start_time: datetime,
        end_time: datetime
    ) -> Dict[str, Any]:
        """Create a rental authenticated as the customer"""
        body = {
            "carId": car_id,
            "startAt": start_time.isoformat(),
            "endAt": end_time.isoformat(),
        }
        response = self._post("/rentals", body, headers={"Authorization": f"Bearer {email}"})

        if response.status_code not in RENTAL_OK_STATUSES:
            raise UpstreamServiceError(
                f"Partner rejected rental of car {car_id} with status {response.status_code}",
                status_code=response.status_code
            )

        self.logger.info(f"Partner rental created for car {car_id} by {email}")
        try:
            return response.json()
        except ValueError:
            return {}
