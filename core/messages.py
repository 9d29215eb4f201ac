# core/messages.py

# ============================================================
# User-facing messages (Hebrew)
# ============================================================
# Internal error detail is logged, never returned. Routes and
# services reference these keys so wording stays consistent.

MESSAGES = {
    # Auth
    "unauthorized": "יש להתחבר כדי לבצע פעולה זו",
    "forbidden_admin": "אין הרשאה - פעולה זו זמינה למנהלי מערכת בלבד",
    "forbidden_committee": "אין הרשאה - פעולה זו זמינה לוועד הבית בלבד",
    "forbidden": "אין לך הרשאה לבצע פעולה זו",

    # Configuration
    "config_missing": "שגיאת תצורה בשרת - חסרים פרטי התחברות לשירות",

    # Validation
    "invalid_request": "הבקשה אינה תקינה",
    "missing_fields_create_user": "חסרים שדות חובה: אימייל, שם מלא, בניין ומספר דירה",
    "missing_fields": "חסרים שדות חובה",
    "invalid_role": "תפקיד לא תקין",
    "user_id_required": "חובה לציין מזהה משתמש",
    "user_and_role_required": "חובה לציין מזהה משתמש ותפקיד",
    "cannot_delete_self": "לא ניתן למחוק את החשבון שלך",
    "cannot_change_own_role": "לא ניתן לשנות את התפקיד של עצמך",
    "no_fields_to_update": "לא נמסרו שדות לעדכון",

    # Conflicts
    "already_member": "המשתמש כבר חבר בבניין זה",
    "invite_invalid": "קוד הזמנה לא תקין",
    "invite_inactive": "ההזמנה אינה פעילה עוד",
    "invite_expired": "קוד ההזמנה פג תוקף",
    "invite_exhausted": "קוד ההזמנה מיצה את מספר השימושים המותרים",
    "user_not_found": "המשתמש לא נמצא",
    "saga_not_compensable": "לא ניתן לבטל תהליך זה",
    "saga_not_found": "התהליך לא נמצא",
    "document_not_found": "המסמך לא נמצא",

    # Upstream failures
    "create_user_failed": "יצירת המשתמש נכשלה",
    "create_profile_failed": "יצירת פרופיל המשתמש נכשלה",
    "member_insert_failed": "המשתמש נוצר אך לא ניתן היה לצרף אותו לבניין",
    "member_add_failed": "לא ניתן היה לצרף את המשתמש לבניין",
    "saga_compensation_failed": "ביטול התהליך לא הושלם",
    "lookup_failed": "שגיאה בגישה לנתונים",
    "delete_profile_failed": "מחיקת פרופיל המשתמש נכשלה",
    "delete_user_failed": "מחיקת המשתמש נכשלה",
    "update_role_failed": "עדכון התפקיד נכשל",
    "update_profile_failed": "עדכון הפרופיל נכשל",
    "pending_invite_failed": "שמירת ההזמנה נכשלה",
    "claim_invite_failed": "ההצטרפות לבניין נכשלה",
    "invite_create_failed": "שגיאה ביצירת הקישור",
    "invite_delete_failed": "שגיאה במחיקה",
    "signed_url_failed": "לא ניתן לפתוח את המסמך",
    "contact_failed": "אירעה שגיאה בשליחת הפניה. נסה שנית.",
    "bug_report_failed": "שליחת הדיווח נכשלה",
    "rate_limited": "יותר מדי בקשות. נסה שוב מאוחר יותר.",
    "internal_error": "שגיאת שרת פנימית",

    # Success
    "existing_user_added": "משתמש קיים נוסף לבניין",
    "new_user_created": "משתמש חדש נוצר ונוסף לבניין. נשלח מייל לאיפוס סיסמה.",
    "user_deleted": "המשתמש נמחק בהצלחה",
    "role_updated": "התפקיד עודכן בהצלחה",
    "joined_building": "הצטרפת לבניין בהצלחה!",
    "invite_deleted": "הקישור נמחק",
    "contact_received": "הפניה נשלחה בהצלחה! ניצור איתך קשר בהקדם.",
    "bug_report_sent": "הדיווח נשלח בהצלחה",
    "saga_compensated": "התהליך בוטל בהצלחה",
}


def msg(key: str) -> str:
    return MESSAGES.get(key, MESSAGES["internal_error"])
