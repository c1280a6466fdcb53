"""Blog router for managing blog posts."""

import os
import logging
from typing import Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy import String, func, or_
from sqlalchemy.orm import Session
from dotenv import load_dotenv

from personal_blog.database import SQLITE_MAX_INTEGER, UNICODE_LOWER, get_db
from personal_blog.models import Activity, Blog, User
from personal_blog.schemas import BlogCreate, BlogUpdate, BlogResponse, BlogPage, MessageResponse
from personal_blog.auth import get_current_user, security
from personal_blog.pagination import MAX_PAGE, effective_limit, paginate

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/blogs", tags=["Blog"])

# Whether PUT /api/blogs/{id} is restricted to the blog's author, like DELETE.
# Off by default: updates have historically been open to any caller.
BLOG_UPDATE_REQUIRES_AUTHOR = os.getenv("BLOG_UPDATE_REQUIRES_AUTHOR", "False").lower() == "true"

SORT_COLUMNS = {
    "createdAt": Blog.created_at,
    "updatedAt": Blog.updated_at,
    "title": Blog.title,
    "category": Blog.category,
}

BLOG_NOT_FOUND = "Blog not found"


def _lower(column):
    return getattr(func, UNICODE_LOWER)(column, type_=String)


def _get_blog_or_404(db: Session, blog_id: int) -> Blog:
    # Ids beyond the INTEGER range cannot exist and would overflow the driver
    blog = None
    if 0 < blog_id <= SQLITE_MAX_INTEGER:
        blog = db.query(Blog).filter(Blog.id == blog_id).first()
    if not blog:
        logger.warning(f"Blog not found: {blog_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=BLOG_NOT_FOUND
        )
    return blog


def _record_activity(db: Session, user_id: int, action: str, blog_id: int):
    """Stage an activity record in the caller's transaction."""
    db.add(Activity(user_id=user_id, action=action, resource="blog", resource_id=blog_id))


@router.post("/create", status_code=status.HTTP_201_CREATED, response_model=BlogResponse)
def create_blog(
    blog_data: BlogCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a new blog post authored by the current user.

    The blog and its "created" activity record are committed together.

    Args:
        blog_data: Validated title, content and optional category
        current_user: Authenticated user
        db: Database session

    Returns:
        BlogResponse: The persisted blog post
    """
    logger.info(f"Creating new blog post: {blog_data.title}")

    new_blog = Blog(
        title=blog_data.title,
        content=blog_data.content,
        category=blog_data.category,
        author_id=current_user.id
    )
    try:
        db.add(new_blog)
        db.flush()
        _record_activity(db, current_user.id, "created", new_blog.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(new_blog)

    logger.info(f"Blog post created successfully: {new_blog.id}")
    return new_blog


@router.get("", response_model=BlogPage)
def list_blogs(
    search: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1),
    sort_by: Literal["createdAt", "updatedAt", "title", "category"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    db: Session = Depends(get_db)
):
    """
    List blog posts with optional search, category filter, sorting and pagination.

    Search is a case-insensitive substring match over title or content.
    """
    limit = effective_limit(limit)
    logger.info(
        f"Fetching blogs: search={search!r} category={category!r} page={page} "
        f"limit={limit} sortBy={sort_by} sortOrder={sort_order}"
    )

    query = db.query(Blog)
    if search:
        term = search.lower()
        query = query.filter(or_(
            _lower(Blog.title).contains(term, autoescape=True),
            _lower(Blog.content).contains(term, autoescape=True),
        ))
    if category:
        query = query.filter(Blog.category == category)

    column = SORT_COLUMNS[sort_by]
    if sort_order == "asc":
        query = query.order_by(column.asc(), Blog.id.asc())
    else:
        query = query.order_by(column.desc(), Blog.id.desc())

    total_blogs, total_pages, blogs = paginate(query, page, limit)
    logger.info(f"Found {total_blogs} blogs, returning {len(blogs)}")

    return BlogPage(
        total_blogs=total_blogs,
        current_page=page,
        total_pages=total_pages,
        blogs=[BlogResponse.model_validate(blog) for blog in blogs]
    )


@router.get("/{blog_id}", response_model=BlogResponse)
def get_blog(blog_id: int, db: Session = Depends(get_db)):
    """
    Get a single blog post.

    Raises:
        HTTPException: If the blog does not exist
    """
    logger.info(f"Fetching blog post {blog_id}")
    return _get_blog_or_404(db, blog_id)


@router.put("/{blog_id}", response_model=BlogResponse)
def update_blog(
    blog_id: int,
    update_data: BlogUpdate,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
):
    """
    Update the supplied fields of a blog post.

    When BLOG_UPDATE_REQUIRES_AUTHOR is enabled the caller must be
    authenticated and be the blog's author.

    Args:
        blog_id: Blog post ID
        update_data: Fields to update
        credentials: Bearer token, only consulted when authorship is required
        db: Database session

    Returns:
        BlogResponse: The updated blog post

    Raises:
        HTTPException: If the blog is missing or the caller may not edit it
    """
    logger.info(f"Updating blog post {blog_id}")

    current_user = None
    if BLOG_UPDATE_REQUIRES_AUTHOR:
        current_user = get_current_user(credentials, db)

    blog = _get_blog_or_404(db, blog_id)

    if current_user is not None and blog.author_id != current_user.id:
        logger.warning(f"User {current_user.id} may not update blog {blog_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to update this blog"
        )

    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(blog, field, value)
        logger.debug(f"Updated {field} for blog {blog_id}")

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(blog)

    logger.info(f"Blog post {blog_id} updated successfully")
    return blog


@router.delete("/{blog_id}", response_model=MessageResponse)
def delete_blog(
    blog_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a blog post owned by the current user.

    The deletion and its "deleted" activity record are committed together.

    Raises:
        HTTPException: If the blog is missing or belongs to another user
    """
    logger.info(f"Deleting blog post {blog_id}")

    blog = _get_blog_or_404(db, blog_id)
    if blog.author_id != current_user.id:
        logger.warning(f"User {current_user.id} may not delete blog {blog_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to delete this blog"
        )

    try:
        db.delete(blog)
        _record_activity(db, current_user.id, "deleted", blog_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Blog post {blog_id} deleted successfully")
    return {"message": "Blog deleted successfully"}
