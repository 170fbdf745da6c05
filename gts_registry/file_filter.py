# Copyright 2025 TIER IV, inc.
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

from pathlib import PurePath

VALID_EXTENSIONS = {".json", ".jsonc", ".gts", ".yaml", ".yml"}


def is_gts_candidate_file_name(file_name: str) -> bool:
    """Return True when ``file_name`` has an extension the registry can decode."""
    if not file_name:
        return False
    return PurePath(file_name).suffix.lower() in VALID_EXTENSIONS
