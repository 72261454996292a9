# Copyright Axis Communications AB.
#
# For a full list of individual contributors, please see the commit history.
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
"""Pod template decoding."""
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import DecodeError, KindMismatchError
from .kubernetes.schemas import Pod


def decode_pod_template(template: Optional[Union[bytes, str]]) -> Pod:
    """Decode a YAML or JSON pod template into a Pod.

    An empty template is allowed and decodes to an empty Pod, which the
    configuration alone can turn into a minimal patient pod.

    :param template: Serialized pod definition.
    :return: The decoded pod.
    """
    if template is None:
        return Pod()
    if isinstance(template, bytes):
        try:
            template = template.decode("utf-8")
        except UnicodeDecodeError as exception:
            raise DecodeError(f"deserializing pod template: {exception}") from exception
    if not template.strip():
        return Pod()

    try:
        document = yaml.safe_load(template)
    except yaml.YAMLError as exception:
        raise DecodeError(f"deserializing pod template: {exception}") from exception
    if document is None:
        return Pod()
    if not isinstance(document, dict):
        raise DecodeError(
            f"deserializing pod template: expected a mapping, got {type(document).__name__}"
        )

    if document.get("kind") != "Pod":
        raise KindMismatchError(document.get("kind"))
    if document.get("apiVersion") != "v1":
        raise DecodeError(
            f"pod template has unsupported apiVersion: {document.get('apiVersion')!r}"
        )

    try:
        return Pod.model_validate(document)
    except ValidationError as exception:
        raise DecodeError(f"deserializing pod template: {exception}") from exception
