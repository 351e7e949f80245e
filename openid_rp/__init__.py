#-*-coding: utf-8-*-
"""
This is an implementation of the relying party side of OpenID 2.0 in Python.
It discovers a user's OpenID provider, builds the authentication redirect and
verifies the provider's answer with a direct check_authentication request.

See the :ref:`openid_rp.consumer` module for the main interface and
:ref:`openid_rp.discover` for the discovery strategies.

.. code-block:: none

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions
    and limitations under the License.
"""

version_info = (0, 1, 0)

__version__ = ".".join(str(x) for x in version_info)

__all__ = [
    'consumer',
    'discover',
    'fetchers',
    'linkparse',
    'urinorm',
    'userinfo',
    'xrds',
    'yadis',
]
