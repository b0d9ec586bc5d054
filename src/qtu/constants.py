# Copyright 2021 - 2025 Universität Tübingen, DKFZ, EMBL, and Universität zu Köln
# for the German Human Genome-Phenome Archive (GHGA)
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

"""Values that are part of the external contracts of this service"""

SERVICE_NAME = "qtu"

# Read by the scanning app, must stay byte-compatible
SHARE_URL_BASE = "https://s.coronawarn.app?v=1#"

RESULTS_PATH = "/api/v1/quicktest/results"

# The backend acknowledges a stored result with "204 No Content"
SUCCESS_STATUS = 204

SALT_BYTES = 16
TEST_ID_BYTES = 16
