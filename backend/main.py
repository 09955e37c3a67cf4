from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ConfigDict
import logging
import traceback
from typing import Dict, Any, Optional
from dotenv import load_dotenv

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

from config import FRONTEND_URL, SQL_DIALECT
from sql_utils.syntax_check import is_complete_sql
from visual_query import (
    QueryNode,
    SQLOperation,
    DocumentImportError,
    build_sql,
    count_subqueries,
    document_to_dict,
    export_document,
    export_filename,
    load_document,
    make_empty_node,
)

app = FastAPI(title="SQL Forge Backend")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"message": "SQL Forge Backend API", "status": "running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/query/new")
async def new_query(operation: SQLOperation = "SELECT"):
    """Empty query node to start editing from."""
    return make_empty_node(operation).model_dump(by_alias=True, exclude_none=True)


class BuildSqlRequest(BaseModel):
    root: Dict[str, Any]
    depth: int = Field(0, ge=0)


class BuildSqlResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    sql: Optional[str] = None
    complete: bool = False
    subquery_count: int = Field(0, alias="subqueryCount")
    error: Optional[str] = None


@app.post("/api/build-sql", response_model=BuildSqlResponse)
async def build_sql_endpoint(req: BuildSqlRequest):
    """
    Render a query tree as SQL for the live preview.

    `complete` is false while the query still renders as a placeholder or
    does not parse.
    """
    try:
        node = QueryNode.model_validate(req.root)
        sql = build_sql(node, req.depth)

        return BuildSqlResponse(
            success=True,
            sql=sql,
            complete=is_complete_sql(sql, SQL_DIALECT),
            subquery_count=count_subqueries(node),
        )
    except Exception as e:
        logger.error(f"[build_sql] Error: {e}")
        logger.error(traceback.format_exc())
        return BuildSqlResponse(
            success=False,
            error=f"Failed to generate SQL: {str(e)}",
        )


class ImportDocumentRequest(BaseModel):
    content: str


class ImportDocumentResponse(BaseModel):
    success: bool
    name: Optional[str] = None
    root: Optional[Dict[str, Any]] = None
    sql: Optional[str] = None
    error: Optional[str] = None


@app.post("/api/documents/import", response_model=ImportDocumentResponse)
async def import_document(req: ImportDocumentRequest):
    """Load a saved .sqlforge.json document and render its SQL."""
    try:
        doc = load_document(req.content)
        logger.info(f"[import] Loaded \"{doc.meta.name}\"")
        return ImportDocumentResponse(
            success=True,
            name=doc.meta.name,
            root=doc.root.model_dump(by_alias=True, exclude_none=True),
            sql=build_sql(doc.root, 0),
        )
    except DocumentImportError as e:
        return ImportDocumentResponse(success=False, error=str(e))
    except Exception as e:
        logger.error(f"[import] Unexpected error: {e}")
        logger.error(traceback.format_exc())
        return ImportDocumentResponse(
            success=False,
            error=f"Failed to import document: {str(e)}",
        )


class ExportDocumentRequest(BaseModel):
    root: Dict[str, Any]
    name: str = ""


class ExportDocumentResponse(BaseModel):
    success: bool
    filename: Optional[str] = None
    document: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


@app.post("/api/documents/export", response_model=ExportDocumentResponse)
async def export_document_endpoint(req: ExportDocumentRequest):
    """Wrap the current query tree in a versioned document for download."""
    try:
        node = QueryNode.model_validate(req.root)
        doc = export_document(node, req.name)
        return ExportDocumentResponse(
            success=True,
            filename=export_filename(doc.meta.name),
            document=document_to_dict(doc),
        )
    except Exception as e:
        logger.error(f"[export] Error: {e}")
        logger.error(traceback.format_exc())
        return ExportDocumentResponse(
            success=False,
            error=f"Failed to export document: {str(e)}",
        )
