from __future__ import annotations

import pytest
import requests

from ecb_rates.ingestion.ecb_client import ECBFeedClient

ECB_SAMPLE_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<gesmes:Envelope xmlns:gesmes="http://www.gesmes.org/xml/2002-08-01"
    xmlns="http://www.ecb.int/vocabulary/2002-08-01/eurofxref">
  <gesmes:subject>Reference rates</gesmes:subject>
  <gesmes:Sender>
    <gesmes:name>European Central Bank</gesmes:name>
  </gesmes:Sender>
  <Cube>
    <Cube time="2024-01-03">
      <Cube currency="USD" rate="1.0919"/>
      <Cube currency="JPY" rate="155.52"/>
      <Cube currency="GBP" rate="0.86518"/>
    </Cube>
    <Cube time="2024-01-02">
      <Cube currency="USD" rate="1.0956"/>
      <Cube currency="JPY" rate="155.74"/>
    </Cube>
  </Cube>
</gesmes:Envelope>
"""


class DummyResponse:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)  # type: ignore[arg-type]


class DummySession:
    def __init__(self, response: DummyResponse | Exception) -> None:
        self.response = response
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, float]] = []
        self.closed = False

    def get(self, url: str, timeout: float) -> DummyResponse:
        self.calls.append((url, timeout))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def ecb_payload() -> bytes:
    return ECB_SAMPLE_XML


@pytest.fixture
def make_feed_client():
    def _make(response: DummyResponse | Exception) -> tuple[ECBFeedClient, DummySession]:
        session = DummySession(response)
        return ECBFeedClient(session=session), session  # type: ignore[arg-type]

    return _make


@pytest.fixture
def feed_client(ecb_payload: bytes, make_feed_client) -> ECBFeedClient:
    client, _ = make_feed_client(DummyResponse(ecb_payload))
    return client


@pytest.fixture
def dummy_response():
    return DummyResponse
