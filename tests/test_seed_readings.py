import pytest

from livability_calculator import LivabilityCalculator
from seed_readings import seed_location, main
from sources import MAJOR_CITIES


class TestSeedLocation:
    def test_counts_per_category(self, storage, reading_source):
        summary = seed_location(storage, reading_source, 10.0, 20.0)
        assert summary == {'air_quality': 1, 'water_security': 1, 'green_space': 1}
        assert len(storage.get_green_space_by_location(10.0, 20.0)) == 1

    def test_with_score(self, storage, reading_source):
        summary = seed_location(storage, reading_source, 10.0, 20.0,
                                calculator=LivabilityCalculator(), label='Plaza')
        assert summary['overall_score'] == 70

        score = storage.get_livability_score_by_location(10.0, 20.0)
        assert score.location == 'Plaza'
        assert score.overall_score == 70


class TestSeedCommand:
    def test_single_location(self, database_url):
        results = main(['--lat', '40.7', '--lon', '-74.0', '--seed', '3',
                        '--score', '--database-url', database_url])
        summary = results['40.700, -74.000']
        assert summary['air_quality'] == 13  # one OMI reading plus 12 TEMPO hours
        assert summary['water_security'] == 2
        assert summary['green_space'] == 2
        assert 0 <= summary['overall_score'] <= 100

    def test_major_cities(self, database_url):
        results = main(['--seed', '5', '--database-url', database_url])
        assert set(results) == {city['name'] for city in MAJOR_CITIES}

    def test_lat_without_lon(self, database_url):
        with pytest.raises(SystemExit):
            main(['--lat', '40.7', '--database-url', database_url])
