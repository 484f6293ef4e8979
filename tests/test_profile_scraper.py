"""
Tests for the profile scraper gateways.

Provider HTTP calls are served by httpx.MockTransport.
"""

import asyncio
import json

import httpx
import pytest

from app.services.profile_scraper import (
    ApifyGateway, ScrapingDogGateway, extract_profile_id, get_scraper, split_full_name
)

URL = "https://www.linkedin.com/in/jane-doe/"


def transport_for(status_code=200, body=None, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=body)
    return httpx.MockTransport(handler)


class TestHelpers:

    @pytest.mark.parametrize("url, expected", [
        ("https://www.linkedin.com/in/jane-doe/", "jane-doe"),
        ("http://linkedin.com/in/jane-doe?trk=abc", "jane-doe"),
        ("https://LINKEDIN.com/in/JaneDoe", "JaneDoe"),
        ("https://linkedin.com/company/acme", None),
    ])
    def test_extract_profile_id(self, url, expected):
        assert extract_profile_id(url) == expected

    @pytest.mark.parametrize("full_name, expected", [
        ("Jane Doe", ("Jane", "Doe")),
        ("Mary Jane van der Berg", ("Mary", "Jane van der Berg")),
        ("Cher", ("Cher", "N/A")),
        ("   ", ("N/A", "N/A")),
        (None, ("N/A", "N/A")),
    ])
    def test_split_full_name(self, full_name, expected):
        assert split_full_name(full_name) == expected


class TestScrapingDog:

    def test_successful_scrape(self):
        seen = []
        body = [{
            "fullName": "Jane Doe",
            "headline": "Data Engineer at Acme",
            "location": "Berlin, Germany",
            "about": "Builds pipelines.",
            "experience": [
                {"position": "Data Engineer", "company_name": "Acme", "starts_at": "Jan 2021", "ends_at": ""},
                "not-a-dict",
            ],
            "education": [{"college_name": "TU Berlin", "college_degree": "MSc"}],
            "skills": ["Python", {"name": "Spark"}, ""],
        }]
        gateway = ScrapingDogGateway(api_key="k", transport=transport_for(body=body, seen=seen))

        result = asyncio.run(gateway.scrape(URL))

        assert result.ok
        candidate = result.candidate
        assert (candidate.first_name, candidate.last_name) == ("Jane", "Doe")
        assert candidate.headline == "Data Engineer at Acme"
        assert candidate.linkedin_url == URL
        assert candidate.experience[0].company == "Acme"
        assert candidate.experience[0].duration == "Jan 2021 - Present"
        assert len(candidate.experience) == 1
        assert candidate.education[0].school == "TU Berlin"
        assert candidate.skills == ["Python", "Spark"]
        assert candidate.summary == "Builds pipelines."

        params = seen[0].url.params
        assert params["id"] == "jane-doe"
        assert params["api_key"] == "k"
        assert params["premium"] == "true"

    def test_profile_without_name_is_failure(self):
        gateway = ScrapingDogGateway(api_key="k", transport=transport_for(body={"headline": "Private"}))

        result = asyncio.run(gateway.scrape(URL))

        assert not result.ok
        assert "private" in result.error.lower()

    @pytest.mark.parametrize("status_code, fragment", [(404, "not found"), (429, "rate limit"), (500, "500")])
    def test_http_errors(self, status_code, fragment):
        gateway = ScrapingDogGateway(api_key="k", transport=transport_for(status_code, body={"error": "x"}))

        result = asyncio.run(gateway.scrape(URL))

        assert not result.ok
        assert fragment in result.error.lower()

    def test_empty_list(self):
        gateway = ScrapingDogGateway(api_key="k", transport=transport_for(body=[]))
        assert not asyncio.run(gateway.scrape(URL)).ok

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        gateway = ScrapingDogGateway(api_key="k", transport=httpx.MockTransport(handler))
        result = asyncio.run(gateway.scrape(URL))

        assert not result.ok
        assert "ConnectError" in result.error

    def test_missing_api_key(self):
        result = asyncio.run(ScrapingDogGateway(api_key="").scrape(URL))
        assert not result.ok
        assert "SCRAPINGDOG_API_KEY" in result.error


class TestApify:

    def test_successful_scrape(self):
        seen = []
        body = [{
            "fullName": "Jane Q Doe",
            "headline": "Analytics Lead",
            "addressWithCountry": "Austin, Texas, United States",
            "linkedinUrl": "https://www.linkedin.com/in/jane-doe",
            "experiences": [
                {"title": "Analytics Lead", "companyName": "Initech", "jobStartedOn": "3-2020", "jobStillWorking": True},
                {"title": "Analyst", "companyName": "Initrode", "jobStartedOn": "1-2017", "jobEndedOn": "2-2020"},
            ],
            "educations": [{"title": "UT Austin", "subtitle": "BBA"}],
            "skills": [{"title": "SQL"}, {"title": "Tableau"}],
        }]
        gateway = ApifyGateway(api_token="t", actor_id="actor~x", transport=transport_for(body=body, seen=seen))

        result = asyncio.run(gateway.scrape(URL))

        assert result.ok
        candidate = result.candidate
        assert (candidate.first_name, candidate.last_name) == ("Jane", "Q Doe")
        assert candidate.location == "Austin, Texas, United States"
        assert [e.duration for e in candidate.experience] == ["3-2020 - Present", "1-2017 - 2-2020"]
        assert candidate.education[0].school == "UT Austin"
        assert candidate.education[0].degree == "BBA"
        assert candidate.skills == ["SQL", "Tableau"]
        assert candidate.summary == "Jane Q Doe is a Analytics Lead based in Austin, Texas, United States."

        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/v2/acts/actor~x/run-sync-get-dataset-items"
        assert request.url.params["token"] == "t"
        assert json.loads(request.content) == {"profileUrls": [URL]}

    def test_no_items(self):
        gateway = ApifyGateway(api_token="t", transport=transport_for(body=[]))
        assert not asyncio.run(gateway.scrape(URL)).ok


class TestGetScraper:

    def test_providers(self):
        assert isinstance(get_scraper("scrapingdog"), ScrapingDogGateway)
        assert isinstance(get_scraper("apify"), ApifyGateway)
        with pytest.raises(ValueError):
            get_scraper("phantombuster")
