"""Unit tests for SQSConnectionManager with mocked aiobotocore (no real AWS)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    NoRegionError,
)

from commonmq.exceptions import BackendTransportError
from commonmq.sqs.connection import SQSConnectionManager

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123/my-queue"


def _client_error(code: str, operation: str = "DeleteMessage") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.send_message = AsyncMock(return_value={"MessageId": "abc-123"})
    client.receive_message = AsyncMock(return_value={})
    client.change_message_visibility = AsyncMock(return_value={})
    client.delete_message = AsyncMock(return_value={})
    client.get_queue_attributes = AsyncMock(return_value={"Attributes": {}})
    return client


@pytest.fixture
def mock_session(mock_client: MagicMock) -> MagicMock:
    session = MagicMock()
    mock_cm = MagicMock()
    mock_cm.__aenter__ = AsyncMock(return_value=mock_client)
    mock_cm.__aexit__ = AsyncMock(return_value=None)
    session.create_client = MagicMock(return_value=mock_cm)
    return session


@pytest.fixture
def conn(mock_session: MagicMock) -> SQSConnectionManager:
    return SQSConnectionManager(region_name="us-east-1", session=mock_session)


@pytest.mark.asyncio
async def test_get_client_creates_and_caches(mock_session: MagicMock) -> None:
    conn = SQSConnectionManager(
        region_name="eu-west-1",
        session=mock_session,
        endpoint_url="http://localhost:4566",
    )
    client1 = await conn.get_client()
    client2 = await conn.get_client()
    assert client1 is client2
    mock_session.create_client.assert_called_once_with(
        "sqs", region_name="eu-west-1", endpoint_url="http://localhost:4566"
    )


def test_constructor_does_not_create_client(mock_session: MagicMock) -> None:
    SQSConnectionManager(session=mock_session)
    mock_session.create_client.assert_not_called()


@pytest.mark.asyncio
async def test_client_creation_errors_become_transport_errors(
    mock_session: MagicMock,
) -> None:
    mock_session.create_client.side_effect = NoRegionError()
    conn = SQSConnectionManager(session=mock_session)
    with pytest.raises(BackendTransportError) as exc_info:
        await conn.get_client()
    assert isinstance(exc_info.value.__cause__, NoRegionError)
    assert conn._client is None
    assert conn._client_cm is None


@pytest.mark.asyncio
async def test_send_message_returns_message_id(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    assert await conn.send_message(QUEUE_URL, "hello") == "abc-123"
    mock_client.send_message.assert_awaited_once_with(
        QueueUrl=QUEUE_URL, MessageBody="hello"
    )


@pytest.mark.asyncio
async def test_receive_message_returns_first(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    raw = {"MessageId": "m1", "ReceiptHandle": "rh-1", "Body": "hello"}
    mock_client.receive_message.return_value = {"Messages": [raw]}
    assert await conn.receive_message(QUEUE_URL, wait_time_seconds=20) == raw
    mock_client.receive_message.assert_awaited_once_with(
        QueueUrl=QUEUE_URL,
        MaxNumberOfMessages=1,
        WaitTimeSeconds=20,
        AttributeNames=["ApproximateReceiveCount"],
    )


@pytest.mark.asyncio
async def test_receive_message_empty(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    assert await conn.receive_message(QUEUE_URL) is None
    mock_client.receive_message.return_value = {"Messages": []}
    assert await conn.receive_message(QUEUE_URL) is None


@pytest.mark.asyncio
async def test_change_message_visibility(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    assert await conn.change_message_visibility(QUEUE_URL, "rh-1", 300) == 1
    mock_client.change_message_visibility.assert_awaited_once_with(
        QueueUrl=QUEUE_URL, ReceiptHandle="rh-1", VisibilityTimeout=300
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code",
    [
        "ReceiptHandleIsInvalid",
        "AWS.SimpleQueueService.MessageNotInflight",
        "MessageNotInflight",
    ],
)
async def test_gone_receipts_report_zero_affected(
    conn: SQSConnectionManager, mock_client: MagicMock, code: str
) -> None:
    mock_client.change_message_visibility.side_effect = _client_error(code)
    mock_client.delete_message.side_effect = _client_error(code)
    assert await conn.change_message_visibility(QUEUE_URL, "rh-1", 300) == 0
    assert await conn.delete_message(QUEUE_URL, "rh-1") == 0


@pytest.mark.asyncio
async def test_visibility_change_on_deleted_message_reports_zero_affected(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    mock_client.change_message_visibility.side_effect = ClientError(
        {
            "Error": {
                "Code": "InvalidParameterValue",
                "Message": (
                    "Value rh-1 for parameter ReceiptHandle is invalid. Reason: "
                    "Message does not exist or is not available for visibility "
                    "timeout change."
                ),
            }
        },
        "ChangeMessageVisibility",
    )
    assert await conn.change_message_visibility(QUEUE_URL, "rh-1", 300) == 0


@pytest.mark.asyncio
async def test_other_invalid_parameter_errors_become_transport_errors(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    mock_client.change_message_visibility.side_effect = _client_error(
        "InvalidParameterValue", "ChangeMessageVisibility"
    )
    with pytest.raises(BackendTransportError):
        await conn.change_message_visibility(QUEUE_URL, "rh-1", 99999)


@pytest.mark.asyncio
async def test_delete_message(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    assert await conn.delete_message(QUEUE_URL, "rh-1") == 1
    mock_client.delete_message.assert_awaited_once_with(
        QueueUrl=QUEUE_URL, ReceiptHandle="rh-1"
    )


@pytest.mark.asyncio
async def test_other_client_errors_become_transport_errors(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    error = _client_error("AccessDenied")
    mock_client.delete_message.side_effect = error
    with pytest.raises(BackendTransportError) as exc_info:
        await conn.delete_message(QUEUE_URL, "rh-1")
    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_botocore_errors_become_transport_errors(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    mock_client.send_message.side_effect = EndpointConnectionError(
        endpoint_url="https://sqs.us-east-1.amazonaws.com"
    )
    with pytest.raises(BackendTransportError) as exc_info:
        await conn.send_message(QUEUE_URL, "hello")
    assert isinstance(exc_info.value.__cause__, EndpointConnectionError)

    mock_client.receive_message.side_effect = _client_error(
        "AWS.SimpleQueueService.NonExistentQueue", "ReceiveMessage"
    )
    with pytest.raises(BackendTransportError):
        await conn.receive_message(QUEUE_URL)


@pytest.mark.asyncio
async def test_close_cleans_up_client(
    conn: SQSConnectionManager, mock_session: MagicMock
) -> None:
    mock_cm = mock_session.create_client.return_value
    await conn.get_client()
    await conn.close()
    mock_cm.__aexit__.assert_called_once()
    assert conn._client is None
    assert conn._client_cm is None


@pytest.mark.asyncio
async def test_close_idempotent_when_never_opened(mock_session: MagicMock) -> None:
    conn = SQSConnectionManager(session=mock_session)
    await conn.close()
    mock_session.create_client.return_value.__aexit__.assert_not_called()


@pytest.mark.asyncio
async def test_health_check_reads_queue_attributes(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    assert await conn.health_check(QUEUE_URL) is True
    mock_client.get_queue_attributes.assert_awaited_once_with(
        QueueUrl=QUEUE_URL, AttributeNames=["QueueArn"]
    )


@pytest.mark.asyncio
async def test_health_check_returns_false_on_failure(
    conn: SQSConnectionManager, mock_client: MagicMock
) -> None:
    mock_client.get_queue_attributes.side_effect = RuntimeError("timeout")
    assert await conn.health_check(QUEUE_URL) is False
