import logging
import os

from django.core.exceptions import ImproperlyConfigured
from django.db.models import Q
from django.utils import timezone
from rest_framework import status, generics, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from backend.exceptions import InternalError, BadRequest
from backend.ids import require_object_id
from backend.utils import api_response, validation_failed
from .emails import send_plain_email
from .models import User
from .otp import otp_store, OTPError
from .permissions import IsAdmin, IsSalesManager, IsSalesManagerOrAdmin, HasCapability, get_request_role
from .roles import CAPABILITIES, CAPABILITY_LABELS, USER_MANAGEMENT
from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserProfileSerializer,
    UserUpdateSerializer,
    StaffCreateSerializer,
    SalespersonCreateSerializer,
    ForgotPasswordSerializer,
    ResetPasswordSerializer,
)

logger = logging.getLogger(__name__)


def get_tokens_for_user(user):
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


class UserRegistrationView(generics.CreateAPIView):
    queryset = User.objects.all()
    serializer_class = UserRegistrationSerializer
    permission_classes = [permissions.AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        user = serializer.save()
        return api_response('Account created successfully', {
            'user': UserProfileSerializer(user).data,
            'tokens': get_tokens_for_user(user),
        }, status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def login_view(request):
    serializer = UserLoginSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_failed(serializer)
    user = serializer.validated_data['user']
    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return api_response('Login successful', {
        'user': UserProfileSerializer(user).data,
        'tokens': get_tokens_for_user(user),
    })


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def logout_view(request):
    refresh_token = request.data.get('refresh_token')
    if refresh_token:
        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError as exc:
            logger.info('Logout with unusable refresh token for %s: %s', request.user.id, exc)
    return api_response('Logout successful')


class RefreshTokenView(TokenRefreshView):
    permission_classes = [permissions.AllowAny]


class UserProfileView(generics.RetrieveUpdateAPIView):
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return UserUpdateSerializer
        return UserProfileSerializer

    def retrieve(self, request, *args, **kwargs):
        return api_response('Profile retrieved successfully', UserProfileSerializer(request.user).data)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(request.user, data=request.data, partial=partial)
        if not serializer.is_valid():
            return validation_failed(serializer)
        user = serializer.save()
        return api_response('Profile updated successfully', UserProfileSerializer(user).data)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def check_user_role_view(request):
    role = get_request_role(request)
    return api_response('Role resolved', {
        'user_id': request.user.id,
        'email': request.user.email,
        'role': request.user.role,
        'resolved_role': role.name,
        'capabilities': role.capabilities,
    })


@api_view(['GET'])
@permission_classes([IsAdmin])
def access_roles_view(request):
    return api_response('Access roles retrieved successfully', [
        {'name': name, 'description': CAPABILITY_LABELS[name]} for name in CAPABILITIES
    ])


class AdminUserListView(generics.ListAPIView):
    serializer_class = UserProfileSerializer
    permission_classes = [HasCapability(USER_MANAGEMENT)]

    def get_queryset(self):
        queryset = User.objects.select_related('created_by', 'sales_manager').order_by('-date_joined')
        search = self.request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(email__icontains=search) |
                Q(full_name__icontains=search) |
                Q(phone_number__icontains=search)
            )
        role = self.request.query_params.get('role', None)
        if role:
            queryset = queryset.filter(role=role.upper())
        status_filter = self.request.query_params.get('status', None)
        if status_filter:
            queryset = queryset.filter(status=status_filter.upper())
        return queryset

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        return api_response('Users retrieved successfully', {
            'users': self.get_serializer(queryset, many=True).data,
            'count': queryset.count(),
        })


def set_user_active(user_id, active):
    require_object_id(user_id, 'user ID')
    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise NotFound('User not found')
    user.is_active = active
    user.status = 'ACTIVE' if active else 'INACTIVE'
    user.save(update_fields=['is_active', 'status'])
    return user


@api_view(['POST'])
@permission_classes([HasCapability(USER_MANAGEMENT)])
def admin_activate_user(request, user_id):
    user = set_user_active(user_id, True)
    return api_response('User activated successfully', UserProfileSerializer(user).data)


@api_view(['POST'])
@permission_classes([HasCapability(USER_MANAGEMENT)])
def admin_deactivate_user(request, user_id):
    if user_id == request.user.id:
        raise BadRequest('You cannot deactivate your own account')
    user = set_user_active(user_id, False)
    return api_response('User deactivated successfully', UserProfileSerializer(user).data)


class StaffCreateView(generics.CreateAPIView):
    serializer_class = StaffCreateSerializer
    permission_classes = [IsAdmin]
    role = None
    success_message = None

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['role'] = self.role
        return context

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        user = serializer.save()
        logger.info('%s %s created by %s', self.role, user.id, request.user.id)
        return api_response(self.success_message, UserProfileSerializer(user).data, status.HTTP_201_CREATED)


class ManagerCreateView(StaffCreateView):
    role = 'MANAGER'
    success_message = 'Manager created successfully'


class SalesManagerCreateView(StaffCreateView):
    role = 'SALES_MANAGER'
    success_message = 'Sales manager created successfully'


class SalespersonCreateView(generics.CreateAPIView):
    serializer_class = SalespersonCreateSerializer
    permission_classes = [IsSalesManagerOrAdmin]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        user = serializer.save()
        return api_response('Salesperson created successfully', UserProfileSerializer(user).data, status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsSalesManager])
def sales_manager_salespersons(request):
    salespersons = User.objects.filter(role='SALESPERSON', sales_manager=request.user).order_by('-date_joined')
    return api_response('Salespersons retrieved successfully', {
        'salespersons': UserProfileSerializer(salespersons, many=True).data,
        'count': salespersons.count(),
    })


def admin_email():
    return os.getenv('ADMIN_EMAIL', '').strip()


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def admin_forgot_password(request):
    serializer = ForgotPasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_failed(serializer)

    email = admin_email()
    if not email:
        logger.error('ADMIN_EMAIL is not configured')
        raise InternalError('Admin email is not configured')

    code = otp_store.issue(email)
    try:
        send_plain_email(
            email,
            'Password Reset OTP',
            f'Your OTP for password reset is: {code}\nThis OTP will expire in 10 minutes.',
        )
    except (ImproperlyConfigured, OSError) as exc:
        otp_store.discard(email)
        logger.error('Failed to send admin OTP email: %s', exc)
        raise InternalError('Failed to send OTP email')

    return api_response('OTP sent to admin email')


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def admin_reset_password(request):
    serializer = ResetPasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_failed(serializer)

    email = admin_email()
    if not email:
        raise InternalError('Admin email is not configured')

    try:
        otp_store.verify(email, serializer.validated_data['otp'])
    except OTPError as exc:
        raise BadRequest(str(exc))

    try:
        admin = User.objects.get(email__iexact=email)
    except User.DoesNotExist:
        raise NotFound('Admin account not found')

    admin.set_password(serializer.validated_data['new_password'])
    admin.save(update_fields=['password'])
    otp_store.discard(email)
    logger.info('Admin password reset for %s', admin.id)
    return api_response('Password reset successfully')
