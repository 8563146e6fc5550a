# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

# Cloud function entry point for the content API.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.
#
# The same router as the FastAPI server handles every request; this module
# only converts between the Flask request/response objects and the router.

# Standard library imports
import json

# Third-party library imports
from firebase_functions import https_fn, logger, options

# Local application imports
from content_api.config import get_settings
from content_api.dependencies import get_content_router
from content_api.router import ApiRequest, ApiResponse, relative_path

CORS_METHODS = ["get", "post", "put", "delete", "options"]


def _to_api_request(req: https_fn.Request) -> ApiRequest:
    return ApiRequest(
        method=req.method,
        path=relative_path(req.path, get_settings().api_prefix),
        query=req.args.to_dict(),
        headers=dict(req.headers),
        body=req.get_data(),
    )


def _to_response(response: ApiResponse) -> https_fn.Response:
    return https_fn.Response(
        json.dumps(response.payload, ensure_ascii=False),
        status=response.status_code,
        mimetype="application/json",
    )


@https_fn.on_request(
    cors=options.CorsOptions(
        cors_origins=get_settings().cors_origin_list, cors_methods=CORS_METHODS
    ),
    memory=options.MemoryOption.MB_256,
)
def api(req: https_fn.Request) -> https_fn.Response:
    """
    Serves /api/content and /api/auth routes.

    Args:
        req (https_fn.Request): The incoming HTTP request.

    Returns:
        A JSON response with the router's status code.
    """
    api_request = _to_api_request(req)
    # The router (and its database pool) is cached for the life of the instance.
    response = get_content_router().dispatch(api_request)
    if response.status_code >= 500:
        logger.error(f"{req.method} {req.path} failed: {response.payload}")
    else:
        logger.info(f"{req.method} {req.path} -> {response.status_code}")
    return _to_response(response)
