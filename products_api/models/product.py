from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime


class ProductCreate(BaseModel):
    """
    Fields a client needs to provide to create a product.
    """

    name: str = Field(..., min_length=1)  # Product display name
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, allow_inf_nan=False)

    model_config = ConfigDict(extra="forbid")


class ProductUpdate(BaseModel):
    """
    Fields a client can provide to update a product.
    Only the fields that are sent are merged into the stored record.
    """

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, allow_inf_nan=False)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        # Defaults are not validated, so this only fires on an explicit null
        if value is None:
            raise ValueError("name cannot be null")
        return value


class ProductResponse(BaseModel):
    """
    All product fields plus system-generated fields.
    This is what clients receive when requesting product details.
    """

    id: str
    name: str
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, allow_inf_nan=False)
    last_updated: datetime  # When the product was last modified

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def model_validate(cls, obj, *args, **kwargs):
        """
        Fill last_updated from the Cosmos _ts field for documents written without it.
        """
        if isinstance(obj, dict) and "last_updated" not in obj and "_ts" in obj:
            obj = {**obj, "last_updated": datetime.fromtimestamp(obj["_ts"])}

        return super().model_validate(obj, *args, **kwargs)
