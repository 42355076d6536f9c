# __init__.py -- The lfsclient package
# Copyright (C) 2026 The lfsclient authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# lfsclient is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Client side of the Git LFS "basic" transfer protocol.

Key components:
- LFS pointer detection, parsing and creation (:mod:`lfsclient.pointer`)
- A local object cache under ``<gitdir>/lfs/objects`` (:mod:`lfsclient.cache`)
- Batch API negotiation (:mod:`lfsclient.batch`)
- Download and upload of objects (:mod:`lfsclient.transfer`)
"""

__version__ = (0, 3, 0)

__all__ = ["__version__"]
