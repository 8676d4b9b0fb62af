"""Example FastAPI app rendering compound JSON:API documents.

Run with:
    uvicorn examples.jsonapi_example_app:app --reload

Try:
    /api/v1/articles?include=author,comments.author
    /api/v1/articles?page[limit]=2&page[offset]=2
    /api/v1/articles/1/relationships/comments
"""
from __future__ import annotations

import os
import sys
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, FastAPI
from sqlalchemy import Column, ForeignKey, Integer, String, func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, relationship, selectinload, sessionmaker

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jsonapi_resources import JSONAPIResource, JSONAPIResponse, RequestContext, get_request_context  # noqa: E402
from jsonapi_resources.core.errors import JSONAPIError  # noqa: E402
from jsonapi_resources.log import init_logging  # noqa: E402
from jsonapi_resources.middleware import ErrorHandlerMiddleware  # noqa: E402
from jsonapi_resources.pagination import StandardPagination  # noqa: E402

DATABASE_URL = "sqlite+aiosqlite:///./jsonapi_example.db"

engine = create_async_engine(DATABASE_URL, echo=True)
async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    articles = relationship("Article", back_populates="author")
    comments = relationship("Comment", back_populates="author")


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    body = Column(String, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"))
    author = relationship("User", back_populates="articles")
    comments = relationship("Comment", back_populates="article")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    body = Column(String, nullable=False)
    article_id = Column(Integer, ForeignKey("articles.id"))
    author_id = Column(Integer, ForeignKey("users.id"))
    article = relationship("Article", back_populates="comments")
    author = relationship("User", back_populates="comments")


class UserResource(JSONAPIResource):
    class Meta:
        type_ = "users"
        fields = ["name", "email"]
        relationships = {"articles": "ArticleResource", "comments": "CommentResource"}


class ArticleResource(JSONAPIResource):
    class Meta:
        type_ = "articles"
        fields = ["title", "body"]
        relationships = {"author": UserResource, "comments": "CommentResource"}


class CommentResource(JSONAPIResource):
    class Meta:
        type_ = "comments"
        fields = ["body"]
        relationships = {"author": UserResource, "article": ArticleResource}


class NotFoundError(JSONAPIError):
    status = "404"
    title = "Not Found"


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


def article_loader_options(ctx: RequestContext) -> list:
    """Eager load exactly what the include paths need; resources never lazy load."""
    options = []
    for path in ctx.include:
        loader = None
        model = Article
        for name in path.split("."):
            attribute = getattr(model, name, None)
            if attribute is None or not hasattr(attribute.property, "mapper"):
                break
            loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
            model = attribute.property.mapper.class_
        if loader is not None:
            options.append(loader)
    return options


async def seed_example_data(session: AsyncSession) -> None:
    """Insert example users, articles and comments if empty."""
    result = await session.execute(select(User.id).limit(1))
    if result.first() is not None:
        return

    jane = User(name="Jane Doe", email="jane.doe@example.com")
    john = User(name="John Smith", email="john.smith@example.com")
    session.add_all([jane, john])
    await session.flush()

    first = Article(title="JSON:API with FastAPI", body="Compound documents.", author_id=jane.id)
    second = Article(title="Nested includes explained", body="include=comments.author", author_id=john.id)
    session.add_all([first, second])
    await session.flush()

    session.add_all(
        [
            Comment(body="Great article!", article_id=first.id, author_id=john.id),
            Comment(body="Helpful examples.", article_id=first.id, author_id=jane.id),
            Comment(body="Thanks for sharing.", article_id=second.id, author_id=jane.id),
        ]
    )
    await session.commit()


app = FastAPI(
    title="JSON:API Resources Example",
    description="Example API rendering JSON:API compound documents.",
    version="0.1.0",
)
app.add_middleware(ErrorHandlerMiddleware)
router = APIRouter(prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    init_logging()
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    async with async_session() as session:
        await seed_example_data(session)


@router.get("/articles")
async def list_articles(
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    paginator = StandardPagination()
    total = (await session.execute(select(func.count(Article.id)))).scalar_one()
    offset, limit = paginator.page_window({"page": ctx.page})
    statement = (
        select(Article)
        .options(*article_loader_options(ctx))
        .order_by(Article.id)
        .offset(offset)
        .limit(limit)
    )
    articles = (await session.execute(statement)).scalars().all()
    return ArticleResource.collection(articles).to_response(ctx, paginator=paginator, total=total)


@router.get("/articles/{article_id}")
async def retrieve_article(
    article_id: int,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    statement = select(Article).options(*article_loader_options(ctx)).where(Article.id == article_id)
    article = (await session.execute(statement)).scalars().first()
    if article is None:
        raise NotFoundError(f"Article {article_id} does not exist.")
    return ArticleResource(article).to_response(ctx)


@router.get("/articles/{article_id}/relationships/comments")
async def article_comments_relationship(
    article_id: int,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    statement = select(Article).options(selectinload(Article.comments)).where(Article.id == article_id)
    article = (await session.execute(statement)).scalars().first()
    if article is None:
        raise NotFoundError(f"Article {article_id} does not exist.")
    comments = CommentResource.collection(article.comments).with_relationship_link(
        lambda link: link.with_links(
            {
                "self": f"{ctx.base_url}/api/v1/articles/{article_id}/relationships/comments",
                "related": f"{ctx.base_url}/api/v1/articles/{article_id}/comments",
            }
        )
    )
    with comments.response_scope(ctx):
        document = comments.to_relationship_document(ctx)
    return JSONAPIResponse(document)


app.include_router(router)
