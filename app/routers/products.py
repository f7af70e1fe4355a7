# app/routers/products.py
from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    UploadFile,
    status,
)
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.core.storage_utils import ObjectStore, get_object_store
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductInput, ProductRead
from app.services.product_service import ImageUpload, ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()


def get_product_service(
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings),
) -> ProductService:
    return ProductService(repo, store, settings.PRODUCT_REQUIRED_FIELDS)


def product_form(
    title: str | None = Form(None),
    description: str | None = Form(None),
    weight: str | None = Form(None),
    category: str | None = Form(None),
    imageUrl: str | None = Form(None),
) -> ProductInput:
    """
    Collect the multipart text fields sent by the admin panel.
    """
    return ProductInput(
        title=title,
        description=description,
        weight=weight,
        category=category,
        image_url=imageUrl,
    )


def _read_upload(file: UploadFile | None) -> ImageUpload | None:
    if file is None:
        return None
    return ImageUpload(content_type=file.content_type, data=file.file.read())


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    List all products, newest first.
    """
    return service.list_products(session)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductInput = Depends(product_form),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Create a new product.

    - Send the image as a file (`image`) or as a link (`imageUrl`).
    - If both are sent, the file wins.
    """
    return service.create_product(session, payload, _read_upload(image))


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    payload: ProductInput = Depends(product_form),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Update an existing product.

    Fields left out of the form keep their stored values.
    """
    return service.update_product(session, product_id, payload, _read_upload(image))


@router.delete("/{product_id}", status_code=status.HTTP_200_OK)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
) -> dict[str, str]:
    """
    Delete a product. Unknown ids are accepted as already deleted.
    """
    service.delete_product(session, product_id)
    return {"message": "Product deleted"}
