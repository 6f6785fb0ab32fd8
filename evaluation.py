"""
Self-evaluation harness.

Treats the running API as a black box: uploads the reference dataset, then
calls each view endpoint in a fixed order and records whether it answered
with HTTP 200 and a parseable JSON body. The duration recorded for each probe
is the one the server reports in its payload, not a client-side timing.

A failing probe (unreachable endpoint, unreadable dataset file, malformed
body) is recorded and the run moves on to the next probe.
"""
import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

import requests

from exceptions import UpstreamUnavailable
from schemas import EvaluationRecord

logger = logging.getLogger(__name__)

INGEST_PATH = "/users"
VIEW_PATHS = (
    "/superusers",
    "/top-countries",
    "/team-insights",
    "/active-users-per-day",
)
UPLOAD_FIELD = "file"


def _reported_duration(payload: Any) -> Optional[int]:
    if not isinstance(payload, dict):
        return None
    value = payload.get("durationMs")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


class EvaluationHarness:
    def __init__(
        self,
        base_url: str,
        dataset_path: str,
        session: Optional[Any] = None,
        timeout: float = 10.0,
    ):
        """
        Args:
            base_url: Root URL of the API under test, e.g. http://localhost:8081
            dataset_path: Local JSON file uploaded by the ingest probe
            session: Object exposing requests-style ``get``/``post``; a fresh
                ``requests.Session`` when omitted
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.dataset_path = Path(dataset_path)
        self._owns_session = session is None
        self.session = requests.Session() if session is None else session
        self.timeout = timeout

    def close(self) -> None:
        """Close the session if the harness created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "EvaluationHarness":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def run(self) -> List[EvaluationRecord]:
        records = [self.probe_ingest()]
        for path in VIEW_PATHS:
            records.append(self.probe_view(path))

        failed = [r.path for r in records if not (r.response_success and r.valid_json)]
        logger.info(
            f"Evaluation finished: {len(records) - len(failed)}/{len(records)} probes healthy",
            extra={"extra_fields": {"failed": failed}}
        )
        return records

    def probe_ingest(self) -> EvaluationRecord:
        url = self.base_url + INGEST_PATH
        try:
            content = self.dataset_path.read_bytes()
        except OSError as e:
            logger.error(f"Cannot read evaluation dataset {self.dataset_path}: {e}")
            return EvaluationRecord(path=url, response_success=False, valid_json=False)

        files = {UPLOAD_FIELD: (self.dataset_path.name, content, "application/json")}
        return self._probe(url, lambda: self.session.post(url, files=files, timeout=self.timeout))

    def probe_view(self, path: str) -> EvaluationRecord:
        url = self.base_url + path
        return self._probe(url, lambda: self.session.get(url, timeout=self.timeout))

    def _send(self, url: str, send: Callable[[], Any]) -> Any:
        try:
            return send()
        except requests.RequestException as e:
            raise UpstreamUnavailable(url, str(e)) from e

    def _probe(self, url: str, send: Callable[[], Any]) -> EvaluationRecord:
        try:
            response = self._send(url, send)
        except UpstreamUnavailable as e:
            logger.warning(str(e), extra={"extra_fields": {"path": url}})
            return EvaluationRecord(path=url, response_success=False, valid_json=False)

        success = response.status_code == 200
        try:
            payload = response.json()
        except ValueError:
            logger.warning(
                f"Response from {url} is not valid JSON",
                extra={"extra_fields": {"path": url, "status_code": response.status_code}}
            )
            return EvaluationRecord(path=url, response_success=success, valid_json=False)

        return EvaluationRecord(
            path=url,
            response_success=success,
            duration_ms=_reported_duration(payload),
            valid_json=True,
        )
