# ecobites/deps.py
from ecobites.core.config import settings
from ecobites.core.geocode import Geocoder

if settings.use_mongo:
    from ecobites.core.db import get_db
    from ecobites.repos.mongo import MongoRepo
    _repo_singleton = MongoRepo(get_db())
else:
    from ecobites.repos.inmemory import InMemoryRepo
    _repo_singleton = InMemoryRepo()

_geocoder_singleton = Geocoder()


def get_repo():
    return _repo_singleton


def get_geocoder() -> Geocoder:
    return _geocoder_singleton
