#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0

import pytest

from light_request import MockRequest, create_request


@pytest.fixture
def json_request() -> MockRequest:
    return create_request(
        url="http://example.com:8080/users?page=1",
        method="post",
        query={"limit": 10},
        headers={"X-Request-Id": "abc"},
        payload={"name": "test"},
    )


@pytest.fixture
def abc_request() -> MockRequest:
    return create_request(payload=b"ABC")
