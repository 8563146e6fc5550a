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

# Content records
CONTENT_TABLE = "contents"
# Display order is stored as a 32-bit signed integer column.
ORDER_MIN = -(2**31)
ORDER_MAX = 2**31 - 1

# Error messages shared by the server and the cloud function.
MESSAGE_CONTENT_NOT_FOUND = "Content not found"
MESSAGE_CONTENT_DELETED = "Content deleted successfully"
MESSAGE_REQUIRED_FIELDS = "Title, body, and section are required"
MESSAGE_INVALID_BODY = "Invalid request body"
MESSAGE_ROUTE_NOT_FOUND = "Route not found"
MESSAGE_INTERNAL_ERROR = "Internal server error"
MESSAGE_AUTH_REQUIRED = "Authentication required"
MESSAGE_TOKEN_EXPIRED = "Token expired"
MESSAGE_INVALID_TOKEN = "Invalid token"
MESSAGE_ADMIN_REQUIRED = "Access denied. Admin privileges required."
