from pydantic import AfterValidator, AliasChoices, BaseModel, EmailStr, Field
from typing import Annotated, Optional

EMAIL_MAX_LENGTH = 250
FNAME_MAX_LENGTH = 150
LNAME_MAX_LENGTH = 100


def _check_email_length(value):
    if value is not None and len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email must not be longer than {EMAIL_MAX_LENGTH} characters")
    return value


LimitedEmail = Annotated[EmailStr, AfterValidator(_check_email_length)]


# Shared properties for user request models
class UserBase(BaseModel):
    email: LimitedEmail


# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str


# Schema for user registration requests; isAdmin is never read from the payload
class UserCreate(UserBase):
    password: str
    fname: Optional[str] = Field(None, max_length=FNAME_MAX_LENGTH)
    lname: Optional[str] = Field(None, max_length=LNAME_MAX_LENGTH)
    role: Optional[str] = None


# Exact-match filter for user lookups, every field optional
class UserQuery(BaseModel):
    email: Optional[LimitedEmail] = None
    fname: Optional[str] = Field(None, max_length=FNAME_MAX_LENGTH)
    lname: Optional[str] = Field(None, max_length=LNAME_MAX_LENGTH)


# Schema for self-service profile updates
class UserUpdate(BaseModel):
    email: Optional[LimitedEmail] = None
    fname: Optional[str] = Field(
        None, max_length=FNAME_MAX_LENGTH, validation_alias=AliasChoices("fname", "firstname")
    )
    lname: Optional[str] = Field(
        None, max_length=LNAME_MAX_LENGTH, validation_alias=AliasChoices("lname", "lastname")
    )
    role: Optional[str] = None
    is_admin: Optional[bool] = Field(None, validation_alias=AliasChoices("isAdmin", "is_admin"))


# Schema for administrative access changes
class AccessUpdate(BaseModel):
    role: Optional[str] = None
    is_admin: Optional[bool] = Field(None, validation_alias=AliasChoices("isAdmin", "is_admin"))


# Directory listing entry
class UserListItem(BaseModel):
    fname: str
    lname: str
    is_admin: bool = Field(alias="isAdmin")
    email: str
    role: str

    class Config:
        from_attributes = True
        populate_by_name = True


# Lookup result entry
class UserSummary(BaseModel):
    fname: str
    lname: str
    email: str

    class Config:
        from_attributes = True


# Output schema for the authenticated user's own record, without the password hash
class UserProfile(BaseModel):
    user_id: str = Field(alias="userId")
    email: str
    fname: str
    lname: str
    role: str
    is_admin: bool = Field(alias="isAdmin")

    class Config:
        from_attributes = True
        populate_by_name = True


class AccessResponse(BaseModel):
    user_id: str = Field(alias="userId")
    role: str
    is_admin: bool = Field(alias="isAdmin")

    class Config:
        from_attributes = True
        populate_by_name = True


# Schema for a successful login
class LoginResponse(BaseModel):
    user_id: str = Field(alias="userId")
    token: str
    is_admin: bool = Field(alias="isAdmin")
    fname: str = Field(alias="fName")
    lname: str = Field(alias="lName")
    email: str
    message: str

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


# Claims resolved from a bearer token
class CallerIdentity(BaseModel):
    user_id: str
    is_admin: bool = False
