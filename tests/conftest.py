"""Shared test fixtures for rolegate."""

from pathlib import Path

import pytest
import yaml

from rolegate import AccessControl
from rolegate.config.models import RolegateConfig


@pytest.fixture
def grant_list():
    """Flat list form, as rows would come out of a database."""
    return [
        {"role": "admin", "resource": "video", "action": "create:any", "attributes": ["*"]},
        {"role": "admin", "resource": "video", "action": "read:any", "attributes": ["*"]},
        {"role": "admin", "resource": "video", "action": "update:any", "attributes": ["*"]},
        {"role": "admin", "resource": "video", "action": "delete:any", "attributes": ["*"]},
        {"role": "user", "resource": "video", "action": "create:own", "attributes": "*, !id"},
        {"role": "user", "resource": "video", "action": "read:any", "attributes": "*; !id"},
        {"role": "user", "resource": "video", "action": "update:own", "attributes": ["*", "!id"]},
        {"role": "user", "resource": "video", "action": "delete:own", "attributes": ["*"]},
    ]


@pytest.fixture
def grants_object():
    return {
        "admin": {
            "video": {
                "create:any": ["*"],
                "read:any": ["*"],
                "update:any": ["*"],
                "delete:any": ["*"],
            },
        },
        "user": {
            "video": {
                "create:own": ["*"],
                "read:own": ["*"],
                "update:own": ["*"],
                "delete:own": ["*"],
            },
        },
    }


@pytest.fixture
def ac():
    return AccessControl()


@pytest.fixture
def sample_config():
    return RolegateConfig()


@pytest.fixture
def policy_dict():
    """Object-form policy with a two-level hierarchy."""
    return {
        "viewer": {
            "article": {"read:any": ["title", "body"]},
        },
        "editor": {
            "$extend": ["viewer"],
            "article": {
                "read:any": ["*", "!meta.internal"],
                "update:own": ["title", "body"],
            },
        },
        "admin": {
            "$extend": ["editor"],
            "article": {"delete:any": ["*"]},
        },
    }


@pytest.fixture
def policy_file(tmp_path: Path, policy_dict) -> Path:
    path = tmp_path / "policy.yaml"
    path.write_text(yaml.safe_dump(policy_dict, sort_keys=False))
    return path
