"""
Tagging utilities for stream ownership.
"""

from typing import Dict, Iterable, List, Optional

from .models import OwnershipTags


def ownership_tags(keys, cluster, app_name: str) -> OwnershipTags:
    """
    Build the ownership tags for a deployment.

    Args:
        keys: Tag keys (anything with sbu/org/app/cluster attributes)
        cluster: Cluster metadata (anything with sbu/org/cluster_id attributes)
        app_name: Application name of the deployment

    Returns:
        OwnershipTags to stamp on created streams
    """
    if not app_name:
        raise ValueError("Application name must not be empty")

    return OwnershipTags(
        sbu=(keys.sbu, cluster.sbu),
        org=(keys.org, cluster.org),
        app=(keys.app, app_name),
        cluster=(keys.cluster, cluster.cluster_id),
    )


def parse_user_tags(tag_strings: Iterable[str]) -> Dict[str, str]:
    """
    Parse user-provided tag strings in format "key=value".

    Args:
        tag_strings: Tag strings in "key=value" format

    Returns:
        Dictionary of parsed tags

    Raises:
        ValueError: If tag string format is invalid
    """
    tags = {}

    for tag_str in tag_strings:
        if "=" not in tag_str:
            raise ValueError(f"Invalid tag format: {tag_str}. Expected 'key=value'")

        key, value = tag_str.split("=", 1)
        if not key.strip() or not value.strip():
            raise ValueError(f"Invalid tag format: {tag_str}. Key and value must not be empty")

        tags[key.strip()] = value.strip()

    return tags


def tags_to_dict(tag_list: Optional[List[Dict[str, str]]]) -> Dict[str, str]:
    """Convert an AWS [{'Key': ..., 'Value': ...}] list into a dict."""
    return {tag['Key']: tag.get('Value', '') for tag in tag_list or []}


def is_owned(tags: Dict[str, str], key: str, value: str) -> bool:
    """
    Check if a stream belongs to this deployment based on its tags.

    Args:
        tags: Stream tags
        key: Ownership tag key
        value: Ownership tag value

    Returns:
        True if the ownership tag is present with the expected value
    """
    return tags.get(key) == value
