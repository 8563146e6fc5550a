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

"""Starter records for a fresh in-memory store."""

from shared.types import Language, Section

SAMPLE_CONTENT = [
    {
        "title": "Online Community of Teachers and Students",
        "body": (
            "Welcome to Moulay Ismail High School online platform where "
            "teachers and students collaborate and learn together."
        ),
        "section": Section.HERO,
        "order": 0,
        "language": Language.EN,
    },
    {
        "title": "مجتمع تعليمي للمعلمين والطلاب عبر الإنترنت",
        "body": (
            "مرحبًا بكم في منصة ثانوية مولاي إسماعيل الإلكترونية حيث "
            "يتعاون المعلمون والطلاب ويتعلمون معًا."
        ),
        "section": Section.HERO,
        "order": 0,
        "language": Language.AR,
    },
    {
        "title": "Welcome to our Community",
        "body": "Join our vibrant educational community",
        "image_url": "https://placehold.co/1200x800",
        "section": Section.SLIDESHOW,
        "order": 0,
        "language": Language.EN,
    },
    {
        "title": "Engage with Teachers and Students",
        "body": "Connect and collaborate with educators and learners",
        "image_url": "https://placehold.co/1200x800",
        "section": Section.SLIDESHOW,
        "order": 1,
        "language": Language.EN,
    },
]
