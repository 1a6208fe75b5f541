from pydantic import BaseModel, Field, model_validator

from app.storecare.schemas.common import AuditedItem


class CategoryCreateRequest(BaseModel):
    category_name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    display_order: int | None = Field(
        default=None,
        description="Omit or send a non-positive value to append after the current highest order.",
    )
    is_popular: bool = False
    icon_ref: str | None = Field(default=None, max_length=100)
    image_ref: str | None = Field(default=None, max_length=500)
    status_id: int | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [{"category_name": "Shoes", "description": "Footwear", "is_popular": True}]
        }
    }


class CategoryUpdateRequest(BaseModel):
    category_name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    display_order: int | None = None
    is_popular: bool | None = None
    icon_ref: str | None = Field(default=None, max_length=100)
    image_ref: str | None = Field(default=None, max_length=500)


class CategoryReorderItem(BaseModel):
    id: str
    display_order: int = Field(..., ge=1)


class CategoryReorderRequest(BaseModel):
    items: list[CategoryReorderItem] = Field(..., min_length=1)

    @model_validator(mode="after")
    def ensure_unique_ids(self):
        seen = set()
        for item in self.items:
            if item.id in seen:
                raise ValueError(f"duplicate category id {item.id}")
            seen.add(item.id)
        return self


class CategoryItem(AuditedItem):
    id: str
    category_code: str
    category_name: str
    description: str | None = None
    display_order: int
    is_popular: bool
    icon_ref: str | None = None
    image_ref: str | None = None


class CategoryResponse(BaseModel):
    category: CategoryItem
    trace_id: str


class CategoryListResponse(BaseModel):
    categories: list[CategoryItem]
    count: int
    trace_id: str


class ProductCreateRequest(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=200)
    category_id: str
    description: str | None = None
    image_ref: str | None = Field(default=None, max_length=500)
    brand_name: str | None = Field(default=None, max_length=200)
    is_featured: bool = False
    status_id: int | None = None


class ProductUpdateRequest(BaseModel):
    product_name: str | None = Field(default=None, min_length=1, max_length=200)
    category_id: str | None = None
    description: str | None = None
    image_ref: str | None = Field(default=None, max_length=500)
    brand_name: str | None = Field(default=None, max_length=200)
    is_featured: bool | None = None


class ProductItem(AuditedItem):
    id: str
    product_code: str
    product_name: str
    description: str | None = None
    image_ref: str | None = None
    brand_name: str | None = None
    is_featured: bool
    view_count: int
    category_id: str
    category_name: str | None = None


class ProductResponse(BaseModel):
    product: ProductItem
    trace_id: str


class ProductListResponse(BaseModel):
    products: list[ProductItem]
    count: int
    trace_id: str
