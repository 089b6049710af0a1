"""Core domain model exports."""

from clubforms.typing.models.activity import Activity, PaymentDetails
from clubforms.typing.models.fields import (
    FIELD_ADAPTER,
    FIELDS_ADAPTER,
    ChoiceField,
    ContentField,
    FieldDescriptor,
    FileField,
    ImageField,
    InputField,
    LabelField,
    LinkField,
    TextField,
    migrate_field_payload,
    parse_field,
    parse_fields,
)
from clubforms.typing.models.media import MediaAsset, UploadedAsset
from clubforms.typing.models.notification import Notification
from clubforms.typing.models.rendering import BuilderCard, ChoiceOption, FieldTypeOption, PublicControl
from clubforms.typing.models.submission import (
    AnswerValue,
    FileReference,
    FileUpload,
    ResponseMap,
    ResponseValue,
    SubmissionRecord,
    answer_to_text,
)

__all__ = [
    "FIELDS_ADAPTER",
    "FIELD_ADAPTER",
    "Activity",
    "AnswerValue",
    "BuilderCard",
    "ChoiceField",
    "ChoiceOption",
    "ContentField",
    "FieldDescriptor",
    "FieldTypeOption",
    "FileField",
    "FileReference",
    "FileUpload",
    "ImageField",
    "InputField",
    "LabelField",
    "LinkField",
    "MediaAsset",
    "Notification",
    "PaymentDetails",
    "PublicControl",
    "ResponseMap",
    "ResponseValue",
    "SubmissionRecord",
    "TextField",
    "UploadedAsset",
    "answer_to_text",
    "migrate_field_payload",
    "parse_field",
    "parse_fields",
]
