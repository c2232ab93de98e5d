"""
Kinesis control-plane access through boto3.
"""

import logging
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ProviderError, StreamAlreadyExistsError, StreamNotFoundError
from .models import StreamStatus
from .tags import tags_to_dict

logger = logging.getLogger(__name__)

ENCRYPTION_TYPE = "KMS"


def _error_code(e: ClientError) -> str:
    return e.response.get('Error', {}).get('Code', 'Unknown')


def _translate(e: Exception, stream_name: Optional[str], action: str) -> ProviderError:
    """Map a boto error onto the streamwright error hierarchy."""
    if isinstance(e, ClientError):
        code = _error_code(e)
        message = f"Failed to {action} stream {stream_name}: {code}"
        if code == 'ResourceNotFoundException':
            return StreamNotFoundError(message, stream_name, code)
        if code == 'ResourceInUseException' and action == 'create':
            return StreamAlreadyExistsError(message, stream_name, code)
        return ProviderError(message, stream_name, code)
    return ProviderError(f"Failed to {action} stream {stream_name}: {e}", stream_name)


class KinesisProvider:
    """Wraps the subset of the Kinesis API the broker needs."""

    def __init__(self, region: str = 'us-west-2', client=None):
        self.region = region
        self._client = client

    @property
    def client(self):
        """Lazy initialization of the Kinesis client."""
        if self._client is None:
            self._client = boto3.client('kinesis', region_name=self.region)
        return self._client

    def describe_status(self, stream_name: str) -> StreamStatus:
        """
        Get the live status of a stream.

        Raises:
            StreamNotFoundError: If the stream does not exist
            ProviderError: For any other API failure
        """
        try:
            response = self.client.describe_stream_summary(StreamName=stream_name)
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, stream_name, 'describe') from e

        summary = response.get('StreamDescriptionSummary', {})
        return StreamStatus.from_provider(summary.get('StreamStatus'))

    def create_stream(self, stream_name: str, shard_count: int) -> None:
        try:
            self.client.create_stream(StreamName=stream_name, ShardCount=shard_count)
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, stream_name, 'create') from e

    def delete_stream(self, stream_name: str) -> None:
        try:
            self.client.delete_stream(StreamName=stream_name)
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, stream_name, 'delete') from e

    def list_stream_names(self) -> List[str]:
        """List every stream visible to the caller's credentials."""
        names: List[str] = []
        try:
            response = self.client.list_streams()
            names.extend(response.get('StreamNames', []))

            while response.get('HasMoreStreams') and names:
                response = self.client.list_streams(ExclusiveStartStreamName=names[-1])
                names.extend(response.get('StreamNames', []))
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, None, 'list') from e

        return names

    def list_tags(self, stream_name: str) -> Dict[str, str]:
        """Get all tags of a stream as a dict."""
        tags: Dict[str, str] = {}
        try:
            response = self.client.list_tags_for_stream(StreamName=stream_name)
            page = response.get('Tags', [])
            tags.update(tags_to_dict(page))

            while response.get('HasMoreTags') and page:
                response = self.client.list_tags_for_stream(
                    StreamName=stream_name,
                    ExclusiveStartTagKey=page[-1]['Key']
                )
                page = response.get('Tags', [])
                tags.update(tags_to_dict(page))
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, stream_name, 'list tags of') from e

        return tags

    def add_tags(self, stream_name: str, tags: Dict[str, str]) -> None:
        try:
            self.client.add_tags_to_stream(StreamName=stream_name, Tags=tags)
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, stream_name, 'tag') from e

    def start_encryption(self, stream_name: str, key_id: str) -> None:
        try:
            self.client.start_stream_encryption(
                StreamName=stream_name,
                EncryptionType=ENCRYPTION_TYPE,
                KeyId=key_id
            )
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, stream_name, 'encrypt') from e
