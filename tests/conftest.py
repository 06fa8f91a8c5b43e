from __future__ import annotations

import pytest

from specmap.config import GeocodingSettings
from support import RecordingSleep, ScriptedGeocodingClient


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def scripted_client() -> ScriptedGeocodingClient:
    return ScriptedGeocodingClient()


@pytest.fixture()
def geocoding_settings() -> GeocodingSettings:
    return GeocodingSettings(base_url="https://geo.example.test/search", delay_seconds=1.0)
