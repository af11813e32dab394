"""Lambda context object handed to handlers by the invoke loop."""

import json
import os
import time
from dataclasses import dataclass
from typing import Any


@dataclass
class CognitoIdentity:
    cognito_identity_id: str | None = None
    cognito_identity_pool_id: str | None = None


@dataclass
class LambdaContext:
    aws_request_id: str
    invoked_function_arn: str = ""
    deadline_ms: int = 0
    function_name: str = ""
    function_version: str = ""
    memory_limit_in_mb: int | None = None
    log_group_name: str = ""
    log_stream_name: str = ""
    identity: CognitoIdentity | None = None
    client_context: Any = None

    @classmethod
    def from_invocation(cls, invocation) -> "LambdaContext":
        """Build a context from runtime env vars and the invocation headers."""
        memory = os.environ.get("AWS_LAMBDA_FUNCTION_MEMORY_SIZE")
        identity = None
        if invocation.cognito_identity:
            raw = json.loads(invocation.cognito_identity)
            identity = CognitoIdentity(
                cognito_identity_id=raw.get("cognitoIdentityId"),
                cognito_identity_pool_id=raw.get("cognitoIdentityPoolId"),
            )
        return cls(
            aws_request_id=invocation.request_id,
            invoked_function_arn=invocation.invoked_function_arn,
            deadline_ms=invocation.deadline_ms,
            function_name=os.environ.get("AWS_LAMBDA_FUNCTION_NAME", ""),
            function_version=os.environ.get("AWS_LAMBDA_FUNCTION_VERSION", ""),
            memory_limit_in_mb=int(memory) if memory else None,
            log_group_name=os.environ.get("AWS_LAMBDA_LOG_GROUP_NAME", ""),
            log_stream_name=os.environ.get("AWS_LAMBDA_LOG_STREAM_NAME", ""),
            identity=identity,
            client_context=json.loads(invocation.client_context) if invocation.client_context else None,
        )

    def get_remaining_time_in_millis(self) -> int:
        return max(self.deadline_ms - int(time.time() * 1000), 0)
