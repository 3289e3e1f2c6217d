"""
Tests for the async geocoding facade.
"""

import asyncio
from unittest.mock import Mock, patch

from app.services.geocoding import service


def provider_returning(**kwargs):
    provider = Mock()
    provider.reverse_geocode = Mock(**kwargs)
    provider.forward_geocode = Mock(**kwargs)
    return provider


def test_reverse_geocode_delegates_to_active_provider(nyc_geocode_result):
    provider = provider_returning(return_value=nyc_geocode_result)
    with patch.object(service, "get_geocoding_provider", return_value=provider):
        result = asyncio.run(service.reverse_geocode(40.7128, -74.006))

    assert result == nyc_geocode_result
    provider.reverse_geocode.assert_called_once_with(40.7128, -74.006)


def test_forward_geocode_delegates_to_active_provider():
    provider = provider_returning(return_value=None)
    with patch.object(service, "get_geocoding_provider", return_value=provider):
        assert asyncio.run(service.forward_geocode("nowhere")) is None

    provider.forward_geocode.assert_called_once_with("nowhere")


def test_batch_reverse_geocode_keeps_order_and_isolates_failures(nyc_geocode_result):
    def reverse(latitude, longitude):
        if latitude == 2.0:
            raise RuntimeError("quota exceeded")
        return dict(nyc_geocode_result, address=f"addr {latitude}")

    provider = Mock()
    provider.reverse_geocode = Mock(side_effect=reverse)
    coordinates = [
        {"latitude": 1.0, "longitude": 1.0},
        {"latitude": 2.0, "longitude": 2.0},
        {"latitude": 3.0, "longitude": 3.0},
        {"lat": 4.0},
    ]

    with patch.object(service, "get_geocoding_provider", return_value=provider):
        results = asyncio.run(service.batch_reverse_geocode(coordinates))

    assert [r["coordinates"] for r in results] == coordinates
    assert results[0]["address"]["address"] == "addr 1.0"
    assert results[1]["address"] is None
    assert results[2]["address"]["address"] == "addr 3.0"
    assert results[3]["address"] is None
