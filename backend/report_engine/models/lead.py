import logging
from typing import Any, Iterable, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

PATCHES = "Patches"
UNASSIGNED = "Unassigned"

# Order types that never enter the digitizing queue
SKIPPED_ORDER_TYPES = {"Stock (Jacket Only)", "Item Sample", "Stock Design"}


class RecordModel(BaseModel):
    """Base for datastore documents: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Documents store explicit nulls for unset flags/lists; let field defaults apply.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class OrderLine(RecordModel):
    product_type: str = ""
    quantity: int = Field(default=0, ge=0)


class FileObject(RecordModel):
    name: Optional[str] = None
    url: Optional[str] = None


class UploadedImage(RecordModel):
    url: Optional[str] = None
    upload_time: Optional[str] = None
    uploaded_by: Optional[str] = None


class UploadSlot(NamedTuple):
    source: str
    has_file: bool
    upload_time: Optional[str]
    uploaded_by: Optional[str]


IMAGE_FIELDS = ("logo_left_images", "logo_right_images", "back_logo_images", "back_design_images")
FINAL_FILE_FIELDS = ("final_logo_dst", "final_back_design_dst", "final_names_dst")


class Layout(RecordModel):
    id: Optional[str] = None
    logo_left_images: List[UploadedImage] = Field(default_factory=list)
    logo_right_images: List[UploadedImage] = Field(default_factory=list)
    back_logo_images: List[UploadedImage] = Field(default_factory=list)
    back_design_images: List[UploadedImage] = Field(default_factory=list)

    final_logo_dst: List[Optional[FileObject]] = Field(default_factory=list)
    final_logo_dst_upload_times: List[Optional[str]] = Field(default_factory=list)
    final_logo_dst_uploaded_by: List[Optional[str]] = Field(default_factory=list)

    final_back_design_dst: List[Optional[FileObject]] = Field(default_factory=list)
    final_back_design_dst_upload_times: List[Optional[str]] = Field(default_factory=list)
    final_back_design_dst_uploaded_by: List[Optional[str]] = Field(default_factory=list)

    final_names_dst: List[Optional[FileObject]] = Field(default_factory=list)
    final_names_dst_upload_times: List[Optional[str]] = Field(default_factory=list)
    final_names_dst_uploaded_by: List[Optional[str]] = Field(default_factory=list)

    def upload_slots(self) -> List[UploadSlot]:
        """Flatten image lists and the index-aligned final file arrays into one list."""
        slots: List[UploadSlot] = []
        for field in IMAGE_FIELDS:
            for image in getattr(self, field):
                slots.append(UploadSlot(field, True, image.upload_time, image.uploaded_by))

        for field in FINAL_FILE_FIELDS:
            files = getattr(self, field)
            times = getattr(self, field + "_upload_times")
            uploaders = getattr(self, field + "_uploaded_by")
            for index in range(max(len(files), len(times), len(uploaders))):
                slots.append(
                    UploadSlot(
                        field,
                        _at(files, index) is not None,
                        _at(times, index),
                        _at(uploaders, index),
                    )
                )
        return slots


def _at(values: List[Any], index: int) -> Any:
    return values[index] if index < len(values) else None


class Lead(RecordModel):
    id: str = ""
    jo_number: Optional[int] = None
    order_type: Optional[str] = None
    priority_type: Optional[str] = None

    is_under_programming: bool = False
    under_programming_timestamp: Optional[str] = None
    is_initial_approval: bool = False
    initial_approval_timestamp: Optional[str] = None
    is_logo_testing: bool = False
    logo_testing_timestamp: Optional[str] = None
    is_revision: bool = False
    revision_timestamp: Optional[str] = None
    is_final_approval: bool = False
    final_approval_timestamp: Optional[str] = None
    is_final_program: bool = False
    final_program_timestamp: Optional[str] = None
    is_digitizing_archived: bool = False

    submission_date_time: str
    assigned_digitizer: Optional[str] = None
    layouts: List[Layout] = Field(default_factory=list)

    customer_name: Optional[str] = None
    sales_representative: Optional[str] = None
    grand_total: Optional[float] = None
    city: Optional[str] = None
    orders: List[OrderLine] = Field(default_factory=list)

    @property
    def sales_quantity(self) -> int:
        return sum(o.quantity for o in self.orders if o.product_type != PATCHES)

    @property
    def sales_amount(self) -> float:
        return self.grand_total or 0

    @property
    def has_jo_number(self) -> bool:
        # J.O. numbers start at 1; 0 is treated as unassigned
        return bool(self.jo_number)

    @property
    def skips_programming(self) -> bool:
        return self.order_type in SKIPPED_ORDER_TYPES

    @property
    def in_programming_queue(self) -> bool:
        return self.has_jo_number and not self.is_final_program and not self.skips_programming


def parse_leads(raw: Iterable[Any]) -> List[Lead]:
    """Validate raw lead documents one at a time, skipping malformed ones."""
    leads: List[Lead] = []
    skipped = 0
    for index, item in enumerate(raw or []):
        if isinstance(item, Lead):
            leads.append(item)
            continue
        try:
            leads.append(Lead.model_validate(item))
        except ValidationError as e:
            skipped += 1
            doc_id = item.get("id") if isinstance(item, dict) else None
            logger.warning("Skipping malformed lead index=%s id=%s: %s", index, doc_id, e.errors()[:3])
    if skipped:
        logger.info("parse_leads accepted=%s skipped=%s", len(leads), skipped)
    return leads
