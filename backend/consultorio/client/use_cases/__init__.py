from .appointments import (
    check_availability_use_case,
    create_appointment_use_case,
    delete_appointment_use_case,
    get_appointment_by_id_use_case,
    get_appointments_use_case,
    update_appointment_status_use_case,
    update_appointment_use_case,
)
from .auth import (
    change_password_use_case,
    check_user_token_use_case,
    confirm_account_use_case,
    get_profile_use_case,
    login_use_case,
    register_user_use_case,
    reset_password_use_case,
    update_password_use_case,
    update_profile_use_case,
)
from .base import UseCaseError
from .budgets import (
    activate_budget_use_case,
    complete_budget_item_use_case,
    complete_budget_use_case,
    delete_budget_use_case,
    get_all_budgets_by_patient_use_case,
    get_budget_by_patient_use_case,
    get_budget_stats_use_case,
    revert_budget_use_case,
    save_budget_use_case,
    update_budget_status_use_case,
)
from .notifications import (
    get_notifications_use_case,
    get_unread_count_use_case,
    mark_notifications_read_use_case,
)
from .patients import (
    create_patient_use_case,
    delete_patient_use_case,
    get_patient_by_id_use_case,
    get_patient_history_use_case,
    get_patients_use_case,
    update_patient_use_case,
)
from .prescriptions import (
    delete_prescription_use_case,
    get_prescriptions_by_patient_use_case,
    save_prescription_use_case,
)
from .treatments import (
    complete_treatment_use_case,
    create_treatment_use_case,
    delete_treatment_use_case,
    get_treatment_by_id_use_case,
    get_treatments_use_case,
    update_treatment_use_case,
)
