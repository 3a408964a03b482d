from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from app.dependencies import get_db, get_current_user
from app.exceptions import ValidationError
from app.models.user import User as UserModel
from app.schemas.user import AuthResponse, Token, UserCreate, UserLogin, UserResponse
from app.services import users as user_service
from app.utils.security import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_token(user: UserModel) -> str:
    return create_access_token(data={"sub": str(user.user_id)})


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    new_user = await user_service.register_user(db, user)
    return {
        "message": "User registered successfully!",
        "user": UserResponse.model_validate(new_user),
        "token": _issue_token(new_user),
    }


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise ValidationError({"email": ["The provided credentials are incorrect."]})
    return {
        "message": "Login successful!",
        "user": UserResponse.model_validate(user),
        "token": _issue_token(user),
    }


@router.post("/token", response_model=Token)
async def login_for_access_token(
    db: AsyncSession = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
):
    # OAuth2 form login for the interactive docs; "username" carries the email
    user = await user_service.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": _issue_token(user), "token_type": "bearer"}


@router.get("/show")
async def show(current_user: UserModel = Depends(get_current_user)):
    return {"user": UserResponse.model_validate(current_user)}
