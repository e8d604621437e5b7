from fastapi import HTTPException, status


def get_invalid_hours_exception():
    hours_exception = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Required hours cannot be negative"
    )
    return hours_exception


def get_unknown_owner_exception():
    owner_exception = HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="No time logs found for this intern"
    )
    return owner_exception
