"""
REST client for the interview directory backend.
"""
import json
import logging
from typing import Optional, Dict, Any, List

import requests

from ...config import API_BASE_URL, REQUEST_TIMEOUT

logger = logging.getLogger("directory_client")


class DirectoryApiError(RuntimeError):
    """Raised when the backend answers with an HTTP error."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Directory API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DirectoryRestClient:
    """REST-based client for interviews and responses."""

    def __init__(self,
                 base_url: str = API_BASE_URL,
                 token: Optional[str] = None,
                 timeout: int = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._http = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        resp = self._http.request(method, url, headers=self._headers(), json=body, timeout=self.timeout)
        if resp.status_code >= 400:
            raise DirectoryApiError(resp.status_code, self._error_message(resp))
        if not resp.content:
            return {}
        return resp.json()

    def _error_message(self, resp: requests.Response) -> str:
        """
        Extract the backend's ``message`` field, falling back to raw text.
        """
        try:
            payload = resp.json()
        except ValueError:
            return resp.text or resp.reason or "unknown error"
        if isinstance(payload, dict) and isinstance(payload.get("message"), str):
            return payload["message"]
        return json.dumps(payload, separators=(",", ":"))

    # Interview directory

    def get_interview(self, interview_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/interviews/{interview_id}")

    def update_interview_status(self, interview_id: str, status: str) -> Dict[str, Any]:
        logger.info("Updating interview %s status to %s", interview_id, status)
        return self._request("PATCH", f"/interviews/{interview_id}/status", {"status": status})

    def create_interview(self,
                         title: str,
                         profession: str,
                         difficulty: str,
                         questions: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request("POST", "/interviews", {
            "title": title,
            "profession": profession,
            "difficulty": difficulty,
            "questions": questions,
        })

    def delete_interview(self, interview_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/interviews/{interview_id}")

    def list_interviews(self) -> List[Dict[str, Any]]:
        payload = self._request("GET", "/interviews")
        if isinstance(payload, list):
            return payload
        return list(payload.get("interviews", []))

    # Responses

    def submit_response(self, question_id: str, interview_id: str, response_text: str) -> Dict[str, Any]:
        logger.info("Submitting response for question %s (%d chars)", question_id, len(response_text))
        return self._request("POST", "/responses", {
            "questionId": question_id,
            "interviewId": interview_id,
            "responseText": response_text,
        })
