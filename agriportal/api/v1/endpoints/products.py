from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status

from agriportal.core.deps import DBSessionDep, CurrentUser
from agriportal.schemas.product import ProductCreate, ProductUpdate, ProductOut
from agriportal.services.product_service import ProductService
from agriportal.services.storage_service import StorageService, UploadedImage

router = APIRouter()

PRODUCT_NOT_FOUND = "Không tìm thấy sản phẩm"


@router.get("", response_model=list[ProductOut])
async def list_products(
    db: DBSessionDep,
    category: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return await ProductService(db).list_products(category=category, limit=limit, offset=offset)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(db: DBSessionDep, data: ProductCreate, user: CurrentUser):
    return await ProductService(db).create_product(user, data.model_dump())


@router.post("/images")
async def upload_product_image(user: CurrentUser, file: UploadFile = File(...)):
    """Store an image and return its URL for use in a product"""
    image = UploadedImage(content=await file.read(), content_type=file.content_type, filename=file.filename)
    try:
        url = StorageService().upload_image(bucket="product-images", user_id=user.id, image=image)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"url": url}


@router.get("/{product_id}", response_model=ProductOut)
async def get_product(db: DBSessionDep, product_id: int):
    product = await ProductService(db).get_product(product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PRODUCT_NOT_FOUND)
    return product


@router.put("/{product_id}", response_model=ProductOut)
async def update_product(db: DBSessionDep, product_id: int, data: ProductUpdate, user: CurrentUser):
    try:
        product = await ProductService(db).update_product(user, product_id, data.model_dump(exclude_unset=True))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PRODUCT_NOT_FOUND)
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(db: DBSessionDep, product_id: int, user: CurrentUser):
    try:
        deleted = await ProductService(db).delete_product(user, product_id)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PRODUCT_NOT_FOUND)


@router.post("/{product_id}/view")
async def track_view(db: DBSessionDep, product_id: int):
    views = await ProductService(db).track_view(product_id)
    if views is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PRODUCT_NOT_FOUND)
    return {"views_count": views}
