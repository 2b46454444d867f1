from unittest.mock import MagicMock, patch

import requests
from django.core.cache import cache
from django.test import TestCase, override_settings

from integrations.services import mappls, nominatim


def _response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload if payload is not None else {}
    resp.text = str(payload)
    resp.raise_for_status.return_value = None
    return resp


MAPPLS_SETTINGS = {
    "MAPPLS_CLIENT_ID": "client",
    "MAPPLS_CLIENT_SECRET": "secret",
    "MAPPLS_TOKEN_URL": "https://outpost.example/token",
    "MAPPLS_SEARCH_URL": "https://atlas.example/autosuggest",
}


class MapplsSuggestTests(TestCase):
    def setUp(self):
        cache.clear()

    @override_settings(MAPPLS_CLIENT_ID="", MAPPLS_CLIENT_SECRET="")
    @patch("integrations.services.mappls.requests")
    def test_missing_credentials_skip_the_call(self, mock_requests):
        self.assertEqual(mappls.suggest_places("Koramangala"), [])
        mock_requests.post.assert_not_called()
        mock_requests.get.assert_not_called()

    @override_settings(**MAPPLS_SETTINGS)
    @patch("integrations.services.mappls.requests.get")
    @patch("integrations.services.mappls.requests.post")
    def test_suggestions_are_parsed_and_token_is_cached(self, mock_post, mock_get):
        mock_post.return_value = _response(payload={"access_token": "tok", "expires_in": 3600})
        mock_get.return_value = _response(
            payload={
                "suggestedLocations": [
                    {
                        "eLoc": "ABC123",
                        "placeName": "Indiranagar",
                        "placeAddress": "Bengaluru, Karnataka 560038",
                        "type": "LOCALITY",
                        "latitude": "12.97",
                        "longitude": "77.64",
                    }
                ]
            }
        )

        first = mappls.suggest_places("Indira")
        mappls.suggest_places("Indiranagar")

        self.assertEqual(mock_post.call_count, 1)
        self.assertEqual(first[0]["place_id"], "ABC123")
        self.assertEqual(first[0]["pincode"], "560038")
        self.assertAlmostEqual(first[0]["lat"], 12.97)
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["params"]["region"], "ind")
        self.assertEqual(kwargs["headers"]["Authorization"], "bearer tok")
        self.assertEqual(kwargs["timeout"], 3.0)

    @override_settings(**MAPPLS_SETTINGS)
    @patch("integrations.services.mappls.requests.get")
    @patch("integrations.services.mappls.requests.post")
    def test_timeout_degrades_to_empty_list(self, mock_post, mock_get):
        mock_post.return_value = _response(payload={"access_token": "tok", "expires_in": 3600})
        mock_get.side_effect = requests.Timeout("slow")

        self.assertEqual(mappls.suggest_places("Whitefield"), [])

    @override_settings(**MAPPLS_SETTINGS)
    @patch("integrations.services.mappls.requests.get")
    @patch("integrations.services.mappls.requests.post")
    def test_unauthorized_drops_cached_token(self, mock_post, mock_get):
        mock_post.return_value = _response(payload={"access_token": "tok", "expires_in": 3600})
        mock_get.return_value = _response(status_code=401, payload={"error": "expired"})

        self.assertEqual(mappls.suggest_places("Whitefield"), [])
        self.assertIsNone(cache.get(mappls.TOKEN_CACHE_KEY))

    def test_short_query_is_ignored(self):
        with patch("integrations.services.mappls.get_access_token") as mock_token:
            self.assertEqual(mappls.suggest_places("ab"), [])
        mock_token.assert_not_called()


class NominatimTests(TestCase):
    @patch("integrations.services.nominatim.requests.get")
    def test_geocode_pincode_parses_first_hit(self, mock_get):
        mock_get.return_value = _response(
            payload=[
                {
                    "lat": "17.44",
                    "lon": "78.38",
                    "address": {"suburb": "Gachibowli", "city": "Hyderabad", "state": "Telangana", "postcode": "500032"},
                }
            ]
        )

        place = nominatim.geocode_pincode("500032")

        self.assertEqual(place["name"], "Gachibowli")
        self.assertEqual(place["city_name"], "Hyderabad")
        self.assertEqual(place["state"], "Telangana")
        self.assertAlmostEqual(place["lng"], 78.38)
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["params"]["postalcode"], "500032")
        self.assertIn("User-Agent", kwargs["headers"])

    @patch("integrations.services.nominatim.requests.get")
    def test_geocode_pincode_without_hits_returns_none(self, mock_get):
        mock_get.return_value = _response(payload=[])
        self.assertIsNone(nominatim.geocode_pincode("999999"))

    @patch("integrations.services.nominatim.requests.get")
    def test_upstream_error_returns_none(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")
        self.assertIsNone(nominatim.geocode_pincode("500032"))
        self.assertIsNone(nominatim.reverse_geocode(17.4, 78.3))

    @patch("integrations.services.nominatim.requests.get")
    def test_reverse_geocode_error_payload_returns_none(self, mock_get):
        mock_get.return_value = _response(payload={"error": "Unable to geocode"})
        self.assertIsNone(nominatim.reverse_geocode(0.0, 0.0))
