"""Deal export request schema."""

from typing import List, Literal, Optional

from pydantic import Field

from dealdesk.schemas.common import ApiModel


class ExportSections(ApiModel):
    deal_info: bool = True
    owner_contract: bool = True
    financial: bool = True
    products: bool = True
    payments: bool = True
    notes: bool = True
    attachments: bool = True
    timeline: bool = True

    def selected(self) -> List[str]:
        return [name for name, enabled in self.model_dump().items() if enabled]


class NotesFilter(ApiModel):
    category: Optional[str] = None
    status: Optional[str] = None


class PdfOptions(ApiModel):
    orientation: Literal["portrait", "landscape"] = "portrait"
    include_branding: bool = True


class ExportRequest(ApiModel):
    sections: ExportSections = Field(default_factory=ExportSections)
    format: Literal["csv", "pdf"] = "pdf"
    notes_filter: NotesFilter = Field(default_factory=NotesFilter)
    pdf_options: PdfOptions = Field(default_factory=PdfOptions)
