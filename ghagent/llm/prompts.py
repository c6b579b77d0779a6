"""
Prompt templates and static bodies.

Templates use ``{{name}}`` placeholders that ``compose_context`` fills
from the composed agent state.
"""

from typing import Iterable

from ghagent.github.resources import Label


ISSUE_OPENED_TEMPLATE = """
# Knowledge
Common type labels names: bug, documentation, duplicate, enhancement, good first issue, help wanted, invalid, question, wontfix
Common priority labels names: high, medium, low, critical, blocking
Best practices for issue triage: categorize issues, verify reproducibility, assign relevant labels, and prioritize based on impact
Key principles of open-source product management: transparency, asynchronous communication, and contributor empowerment

# Background
About {{agentName}}:
{{bio}}
{{lore}}

# Attachments
{{attachments}}

# Capabilities
Note that {{agentName}} is capable of reading/seeing/hearing various forms of media, including images, videos, audio, plaintext and PDFs. Recent attachments have been included above under the "Attachments" section.

{{messageDirections}}

# Task: Triage the following GitHub Issue by defining the priority and type label taking into account the {{agentName}} experience as Product Manager.

## Issue Title
{{title}}

## Issue Body
{{body}}

# Instructions: Define the issue priority and type label depending on the issue title, description and label description. The available labels are (label_name: label_description):

{{labels}}

# Response: The response must be ONLY a JSON containing the issue priority and type label. Response format should be formatted in a valid JSON block like this:

```json
{ "priority": "high", "type": "bug" }
```
"""


DISCUSSION_CREATED_BODY = """
## Summary

Lorem ipsum dolor sit amet, consectetur adipiscing elit. Aenean magna nunc, condimentum a purus eu, congue fringilla libero. Aenean sagittis justo at egestas rutrum. Pellentesque non elit suscipit, auctor justo ac, mollis lorem. Maecenas tempor consectetur efficitur. In hac habitasse platea dictumst. Vestibulum imperdiet ultricies dolor, at consectetur dui faucibus nec.

## Vote

| Feature | Description | Vote | Votes |
| ------- | ----------- | ---- | ----- |
| Create User | Add POST /user endpoint | [Click here](http://localhost:3000/sign-vote) | #################### (20) |
| Delete User | Add DELETE /user endpoint | [Click here](http://localhost:3000/sign-vote) | ########################## (30) |
"""


def render_labels(labels: Iterable[Label]) -> str:
    """
    Render repository labels as a Markdown bullet list.

    Each label becomes ``- name: description`` followed by a newline,
    or ``- name`` when it has no description.
    """
    content = ""
    for label in labels:
        suffix = f": {label.description}" if label.description else ""
        content += f"- {label.name}{suffix}\n"
    return content
