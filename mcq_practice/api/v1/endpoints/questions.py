# mcq_practice/api/v1/endpoints/questions.py
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from mcq_practice.core.security import get_current_admin, get_current_user
from mcq_practice.db.session import get_db
from mcq_practice.models.question import Question
from mcq_practice.models.user import User
from mcq_practice.schemas.question import (
    BulkImportResult,
    BulkQuestionsRequest,
    BulkTextRequest,
    ImageUploadResult,
    QuestionCreate,
    QuestionPublic,
    QuestionUpdate,
)
from mcq_practice.services import question_service, upload_service
from mcq_practice.services.bulk_parser import parse_bulk_questions

router = APIRouter(prefix="/questions", tags=["questions"])


def _get_question_or_404(db: Session, question_id: int) -> Question:
    q = question_service.get_question(db, question_id)
    if not q:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not found",
        )
    return q


def _import_result(questions: List[Question]) -> BulkImportResult:
    return BulkImportResult(
        message=f"Successfully added {len(questions)} questions",
        count=len(questions),
    )


@router.get("/", response_model=List[QuestionPublic])
def list_questions(
    topic_id: int | None = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return question_service.list_questions(db, topic_id=topic_id, skip=skip, limit=limit)


@router.get("/random", response_model=List[QuestionPublic])
def random_questions(
    count: int = Query(10, ge=1, le=question_service.MAX_RANDOM_COUNT),
    topic_id: int | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Random practice set. May return fewer than ``count`` questions when the
    bank (or the topic) is smaller.
    """
    return question_service.random_questions(db, count=count, topic_id=topic_id)


@router.post("/", response_model=QuestionPublic, status_code=status.HTTP_201_CREATED)
def create_question(
    obj_in: QuestionCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return question_service.create_question(db, obj_in=obj_in)


@router.post("/bulk", response_model=BulkImportResult, status_code=status.HTTP_201_CREATED)
def bulk_create(
    payload: BulkQuestionsRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    created = question_service.bulk_create_questions(db, payload.questions)
    return _import_result(created)


@router.post("/bulk-text", response_model=BulkImportResult, status_code=status.HTTP_201_CREATED)
def bulk_create_from_text(
    payload: BulkTextRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Import questions pasted in the QUESTION:/TOPIC:/A:.../CORRECT: format.
    """
    parsed = parse_bulk_questions(payload.text)
    created = question_service.bulk_create_questions(db, parsed)
    return _import_result(created)


@router.post("/upload-bulk", response_model=BulkImportResult, status_code=status.HTTP_201_CREATED)
def bulk_create_from_file(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    text = upload_service.read_text_upload(file)
    parsed = parse_bulk_questions(text)
    created = question_service.bulk_create_questions(db, parsed)
    return _import_result(created)


@router.post("/upload-image", response_model=ImageUploadResult, status_code=status.HTTP_201_CREATED)
def upload_image(
    file: UploadFile = File(...),
    current_admin: User = Depends(get_current_admin),
):
    return ImageUploadResult(image_path=upload_service.save_question_image(file))


@router.get("/{question_id}", response_model=QuestionPublic)
def get_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_question_or_404(db, question_id)


@router.put("/{question_id}", response_model=QuestionPublic)
def update_question(
    question_id: int,
    obj_in: QuestionUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    q = _get_question_or_404(db, question_id)
    return question_service.update_question(db, db_obj=q, obj_in=obj_in)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    q = _get_question_or_404(db, question_id)
    question_service.delete_question(db, db_obj=q)
    return None
