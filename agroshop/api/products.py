from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional
from agroshop.db.session import get_db, commit
from agroshop.models.bill import BillItem
from agroshop.models.product import Product, PRODUCT_TYPES
from agroshop.models.user import User
from agroshop.schemas.product import Product as ProductSchema, ProductCreate, ProductUpdate
from agroshop.schemas.pagination import PaginatedResponse
from agroshop.auth.security import get_current_active_user, is_admin

router = APIRouter()

@router.post(
    "/", 
    response_model=ProductSchema, 
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product"
)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Add a product to the shop inventory.
    
    - **name**: Product name (required)
    - **type**: insecticide, pesticide or fertilizer
    - **price_per_unit**: Selling price per unit
    - **stock_quantity**: Units currently in stock
    - **reorder_level**: Stock level at or below which the product counts as low stock
    """
    existing_product = db.query(Product).filter(Product.name.ilike(product.name)).first()
    if existing_product:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product with this name already exists"
        )
    
    db_product = Product(**product.model_dump(), created_by=current_user.id)
    db.add(db_product)
    commit(db)
    db.refresh(db_product)
    return db_product

@router.get(
    "/", 
    response_model=PaginatedResponse[ProductSchema],
    summary="Get all products with filtering"
)
def read_products(
    page: int = Query(1, ge=1, description="Page number starting from 1"),
    per_page: int = Query(20, ge=1, le=100, description="Items per page (1-100)"),
    type: Optional[str] = Query(None, description="Filter by product type"),
    low_stock: Optional[bool] = Query(None, description="Only products at or below their reorder level"),
    search: Optional[str] = Query(None, description="Search in product name, brand and description"),
    sort_by: str = Query("name", description="Sort by field: name, price_per_unit, stock_quantity, created_at"),
    sort_order: str = Query("asc", description="Sort order: asc or desc"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    query = db.query(Product)
    
    if type:
        if type not in PRODUCT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid product type. Must be one of: {', '.join(PRODUCT_TYPES)}"
            )
        query = query.filter(Product.type == type)
    
    if low_stock:
        query = query.filter(Product.stock_quantity <= Product.reorder_level)
    
    if search:
        query = query.filter(or_(
            Product.name.ilike(f"%{search}%"),
            Product.brand.ilike(f"%{search}%"),
            Product.description.ilike(f"%{search}%")
        ))
    
    valid_sort_fields = ["name", "price_per_unit", "stock_quantity", "created_at"]
    if sort_by not in valid_sort_fields:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid sort field. Must be one of: {', '.join(valid_sort_fields)}"
        )
    
    if sort_order not in ["asc", "desc"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Sort order must be 'asc' or 'desc'"
        )
    
    sort_column = getattr(Product, sort_by)
    if sort_order == "desc":
        sort_column = sort_column.desc()
    query = query.order_by(sort_column)
    
    total_count = query.count()
    total_pages = (total_count + per_page - 1) // per_page
    
    products = query.offset((page - 1) * per_page).limit(per_page).all()
    
    return {
        "items": products,
        "total": total_count,
        "page": page,
        "per_page": per_page,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1
    }

@router.get("/{product_id}", response_model=ProductSchema, summary="Get product by ID")
def read_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    db_product = db.query(Product).filter(Product.id == product_id).first()
    if db_product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, 
            detail="Product not found"
        )
    return db_product

@router.put("/{product_id}", response_model=ProductSchema, summary="Update a product")
def update_product(
    product_id: int,
    product: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Update an existing product. Only the fields sent are changed.
    """
    db_product = db.query(Product).filter(Product.id == product_id).first()
    if db_product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, 
            detail="Product not found"
        )
    
    # Check if name change would cause conflict
    if product.name and product.name != db_product.name:
        existing_product = db.query(Product).filter(
            Product.name.ilike(product.name),
            Product.id != product_id
        ).first()
        if existing_product:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Another product with this name already exists"
            )
    
    update_data = product.model_dump(exclude_unset=True)
    for field in update_data:
        setattr(db_product, field, update_data[field])
    
    db.add(db_product)
    commit(db)
    db.refresh(db_product)
    return db_product

@router.delete("/{product_id}", summary="Delete a product")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(is_admin)
):
    db_product = db.query(Product).filter(Product.id == product_id).first()
    if db_product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, 
            detail="Product not found"
        )
    
    if db.query(BillItem).filter(BillItem.product_id == product_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product appears on bills and cannot be deleted"
        )
    
    db.delete(db_product)
    commit(db)
    return {"ok": True, "message": "Product deleted successfully"}
