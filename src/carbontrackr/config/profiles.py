"""Configuration profile management.

Detects the configuration profile from the environment.
"""

import os
from enum import Enum

PROFILE_ENV = "CARBONTRACKR_PROFILE"


class Profile(Enum):
    """Available configuration profiles."""

    DEV = "dev"
    PROD = "prod"
    TEST = "test"


def detect_profile() -> Profile:
    """Detect appropriate configuration profile.

    Reads the CARBONTRACKR_PROFILE environment variable and falls back to
    the development profile.

    Returns:
        Profile enum value
    """
    env_profile = os.environ.get(PROFILE_ENV, "").lower()
    profile_map = {
        "prod": Profile.PROD,
        "dev": Profile.DEV,
        "test": Profile.TEST,
    }
    return profile_map.get(env_profile, Profile.DEV)


__all__ = [
    "PROFILE_ENV",
    "Profile",
    "detect_profile",
]
