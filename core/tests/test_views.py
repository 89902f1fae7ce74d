import json
import shutil
import tempfile
from datetime import datetime
from django.test import TestCase, override_settings
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone
from ..models import Case, Client, Consultation, Document

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()
PASSWORD = 'testpass123'


def at(hour, minute=0, day=1):
    return timezone.make_aware(datetime(2030, 5, day, hour, minute))


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ViewTestCase(TestCase):
    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(username='admin', password=PASSWORD, role=User.ROLE_ADMIN)
        cls.manager = User.objects.create_user(username='manager', password=PASSWORD, role=User.ROLE_MANAGER)
        cls.lawyer = User.objects.create_user(
            username='lawyer', password=PASSWORD, role=User.ROLE_LAWYER, first_name='Ann', last_name='Counsel',
        )
        cls.client_user = User.objects.create_user(username='jane', password=PASSWORD)
        cls.jane = Client.objects.create(user=cls.client_user, name='Jane Roe', email='jane@example.com')
        cls.john = Client.objects.create(name='John Doe', email='john@example.com')
        cls.jane_case = Case.objects.create(
            case_number='C-1', title='Lease dispute', description='-', category='CIVIL',
            client=cls.jane, lawyer=cls.lawyer,
        )
        cls.john_case = Case.objects.create(
            case_number='C-2', title='Tax audit', description='-', category='TAX', client=cls.john,
        )

    def login(self, user):
        self.client.login(username=user.username, password=PASSWORD)


class AccessTest(ViewTestCase):
    def test_anonymous_sent_to_login(self):
        response = self.client.get(reverse('dashboard'))
        self.assertRedirects(response, f"{reverse('login')}?next={reverse('dashboard')}")

    def test_landing_and_lawyers_are_public(self):
        self.assertEqual(self.client.get(reverse('landing_page')).status_code, 200)
        response = self.client.get(reverse('lawyers_list'))
        self.assertContains(response, 'Ann Counsel')

    def test_dashboard_for_every_role(self):
        for user in (self.admin, self.manager, self.lawyer, self.client_user):
            self.login(user)
            self.assertEqual(self.client.get(reverse('dashboard')).status_code, 200, user.username)
            self.client.logout()

    def test_client_cannot_open_statistics(self):
        self.login(self.client_user)
        response = self.client.get(reverse('statistics'), follow=True)
        self.assertRedirects(response, reverse('dashboard'))
        self.assertContains(response, 'You do not have permission to access this page.')

    def test_lawyer_cannot_manage_users(self):
        self.login(self.lawyer)
        response = self.client.get(reverse('user_list'))
        self.assertRedirects(response, reverse('dashboard'))

    def test_client_sees_only_own_cases(self):
        self.login(self.client_user)
        response = self.client.get(reverse('case_list'))
        self.assertContains(response, 'Lease dispute')
        self.assertNotContains(response, 'Tax audit')

        response = self.client.get(reverse('case_detail', args=[self.john_case.pk]))
        self.assertRedirects(response, reverse('dashboard'))

    def test_lawyer_client_list(self):
        self.login(self.lawyer)
        response = self.client.get(reverse('client_list'))
        self.assertContains(response, 'Jane Roe')
        self.assertNotContains(response, 'John Doe')


class RegistrationTest(ViewTestCase):
    def test_register_creates_inactive_client(self):
        response = self.client.post(reverse('register'), {
            'username': 'newbie',
            'email': 'newbie@example.com',
            'name': 'New Client',
            'password1': 'ComplexPass123!',
            'password2': 'ComplexPass123!',
            'phone': '+1234567890',
        })
        self.assertRedirects(response, reverse('login'))
        user = User.objects.get(username='newbie')
        self.assertFalse(user.is_active)
        self.assertEqual(user.role, User.ROLE_CLIENT)
        self.assertEqual(user.client.email, 'newbie@example.com')


class ConsultationViewTest(ViewTestCase):
    def booking(self, **overrides):
        data = {
            'lawyer': self.lawyer.pk,
            'start_time': '2030-05-01T10:30',
            'duration_minutes': 60,
            'consultation_type': 'OFFICE',
            'topic': 'Lease advice',
        }
        data.update(overrides)
        return data

    def test_client_books_for_themselves(self):
        self.login(self.client_user)
        response = self.client.post(reverse('consultation_create'), self.booking())
        consultation = Consultation.objects.get()
        self.assertRedirects(response, reverse('consultation_detail', args=[consultation.pk]))
        self.assertEqual(consultation.client, self.jane)
        self.assertEqual(consultation.status, Consultation.STATUS_SCHEDULED)

    def test_conflict_shown_on_form(self):
        Consultation.objects.create(client=self.john, lawyer=self.lawyer, start_time=at(10), topic='Audit')
        self.login(self.client_user)
        response = self.client.post(reverse('consultation_create'), self.booking())
        self.assertEqual(response.status_code, 200)
        self.assertIn(
            'The lawyer is unavailable at this time. Please choose a different time or lawyer.',
            response.context['form'].non_field_errors(),
        )
        self.assertEqual(Consultation.objects.count(), 1)

    def test_back_to_back_booking_accepted(self):
        Consultation.objects.create(client=self.john, lawyer=self.lawyer, start_time=at(9, 30), topic='Audit')
        self.login(self.client_user)
        self.client.post(reverse('consultation_create'), self.booking())
        self.assertEqual(Consultation.objects.filter(lawyer=self.lawyer).count(), 2)

    def test_past_booking_rejected(self):
        self.login(self.client_user)
        response = self.client.post(reverse('consultation_create'), self.booking(start_time='2001-05-01T10:30'))
        self.assertEqual(response.status_code, 200)
        self.assertIn('The consultation date must be in the future.', response.context['form'].non_field_errors())
        self.assertFalse(Consultation.objects.exists())

    def test_client_without_profile_sent_to_profile(self):
        orphan = User.objects.create_user(username='orphan', password=PASSWORD)
        self.login(orphan)
        response = self.client.get(reverse('consultation_create'))
        self.assertRedirects(response, reverse('profile'))

    def test_manager_assign_conflict(self):
        Consultation.objects.create(client=self.john, lawyer=self.lawyer, start_time=at(10), topic='Audit')
        consultation = Consultation.objects.create(client=self.jane, start_time=at(10, 30), topic='Lease')
        self.login(self.manager)
        response = self.client.post(
            reverse('consultation_assign', args=[consultation.pk]), {'lawyer': self.lawyer.pk}, follow=True,
        )
        self.assertContains(response, 'The lawyer is unavailable at this time.')
        consultation.refresh_from_db()
        self.assertIsNone(consultation.lawyer)

    def test_lawyer_changes_status(self):
        consultation = Consultation.objects.create(client=self.jane, lawyer=self.lawyer, start_time=at(10), topic='Lease')
        self.login(self.lawyer)
        self.client.post(reverse('consultation_change_status', args=[consultation.pk]), {'status': 'COMPLETED'})
        consultation.refresh_from_db()
        self.assertEqual(consultation.status, 'COMPLETED')

    def test_reopening_cancelled_booking_onto_taken_slot(self):
        cancelled = Consultation.objects.create(
            client=self.jane, lawyer=self.lawyer, start_time=at(10), topic='Lease',
            status=Consultation.STATUS_CANCELLED_BY_CLIENT,
        )
        Consultation.objects.create(client=self.john, lawyer=self.lawyer, start_time=at(10), topic='Audit')
        self.login(self.lawyer)
        response = self.client.post(
            reverse('consultation_change_status', args=[cancelled.pk]), {'status': 'SCHEDULED'}, follow=True,
        )
        self.assertContains(response, 'The lawyer is unavailable at this time.')
        cancelled.refresh_from_db()
        self.assertEqual(cancelled.status, Consultation.STATUS_CANCELLED_BY_CLIENT)

    def test_client_cannot_change_status(self):
        consultation = Consultation.objects.create(client=self.jane, lawyer=self.lawyer, start_time=at(10), topic='Lease')
        self.login(self.client_user)
        self.client.post(reverse('consultation_change_status', args=[consultation.pk]), {'status': 'COMPLETED'})
        consultation.refresh_from_db()
        self.assertEqual(consultation.status, Consultation.STATUS_SCHEDULED)

    def test_detail_visibility(self):
        consultation = Consultation.objects.create(client=self.john, start_time=at(10), topic='Audit')
        self.login(self.client_user)
        response = self.client.get(reverse('consultation_detail', args=[consultation.pk]))
        self.assertRedirects(response, reverse('dashboard'))
        self.client.logout()
        self.login(self.manager)
        self.assertContains(self.client.get(reverse('consultation_detail', args=[consultation.pk])), 'Audit')


class CaseViewTest(ViewTestCase):
    def test_lawyer_uploads_document(self):
        self.login(self.lawyer)
        response = self.client.post(reverse('case_detail', args=[self.jane_case.pk]), {
            'title': 'Lease contract',
            'document_type': 'CONTRACT',
            'file': SimpleUploadedFile('lease.txt', b'terms', content_type='text/plain'),
        })
        self.assertRedirects(response, reverse('case_detail', args=[self.jane_case.pk]))
        document = Document.objects.get()
        self.assertEqual(document.uploaded_by, self.lawyer)
        self.assertEqual(document.case, self.jane_case)

    def test_client_cannot_upload(self):
        self.login(self.client_user)
        self.client.post(reverse('case_detail', args=[self.jane_case.pk]), {
            'title': 'Sneaky',
            'document_type': 'OTHER',
            'file': SimpleUploadedFile('x.txt', b'x', content_type='text/plain'),
        })
        self.assertFalse(Document.objects.exists())

    def test_final_status_closes_case(self):
        self.login(self.lawyer)
        self.client.post(reverse('case_change_status', args=[self.jane_case.pk]), {'status': 'SETTLED'})
        self.jane_case.refresh_from_db()
        self.assertEqual(self.jane_case.close_date, timezone.localdate())

    def test_search(self):
        self.login(self.manager)
        response = self.client.get(reverse('case_list'), {'q': 'AUDIT'})
        self.assertContains(response, 'Tax audit')
        self.assertNotContains(response, 'Lease dispute')

    def test_manager_deletes_case_with_documents(self):
        Document.objects.create(
            case=self.john_case, title='Return',
            file=SimpleUploadedFile('return.txt', b'2029', content_type='text/plain'),
        )
        self.login(self.manager)
        response = self.client.get(reverse('case_delete', args=[self.john_case.pk]))
        self.assertContains(response, '1 document(s) attached')
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse('case_delete', args=[self.john_case.pk]))
        self.assertRedirects(response, reverse('case_list'))
        self.assertFalse(Case.objects.filter(pk=self.john_case.pk).exists())
        self.assertFalse(Document.objects.exists())

    def test_lawyer_cannot_delete_case(self):
        self.login(self.lawyer)
        self.client.post(reverse('case_delete', args=[self.jane_case.pk]))
        self.assertTrue(Case.objects.filter(pk=self.jane_case.pk).exists())

    def test_manager_assigns_case_lawyer(self):
        self.login(self.manager)
        response = self.client.get(reverse('case_detail', args=[self.john_case.pk]))
        self.assertEqual(list(response.context['lawyers']), [self.lawyer])
        response = self.client.post(reverse('case_assign_lawyer', args=[self.john_case.pk]), {'lawyer': self.lawyer.pk})
        self.assertRedirects(response, reverse('case_detail', args=[self.john_case.pk]))
        self.john_case.refresh_from_db()
        self.assertEqual(self.john_case.lawyer, self.lawyer)

    def test_case_assignment_rejects_non_lawyers(self):
        self.login(self.manager)
        response = self.client.post(
            reverse('case_assign_lawyer', args=[self.john_case.pk]), {'lawyer': self.manager.pk}, follow=True,
        )
        self.assertContains(response, 'not found')
        self.john_case.refresh_from_db()
        self.assertIsNone(self.john_case.lawyer)

    def test_lawyer_cannot_assign_cases(self):
        self.login(self.lawyer)
        self.client.post(reverse('case_assign_lawyer', args=[self.john_case.pk]), {'lawyer': self.lawyer.pk})
        self.john_case.refresh_from_db()
        self.assertIsNone(self.john_case.lawyer)


class StatisticsViewTest(ViewTestCase):
    def test_page(self):
        self.login(self.manager)
        response = self.client.get(reverse('statistics'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['stats']['total_cases'], 2)

    def test_chart_json(self):
        self.login(self.admin)
        response = self.client.get(reverse('statistics_chart', args=['case-category']))
        payload = json.loads(response.content)
        self.assertEqual(payload['labels'][0], 'Civil')
        self.assertEqual(len(payload['labels']), len(payload['data']))
        self.assertEqual(sum(payload['data']), 2)

    def test_unknown_chart(self):
        self.login(self.admin)
        self.assertEqual(self.client.get(reverse('statistics_chart', args=['weather'])).status_code, 404)

    def test_period_defaults_to_current_month(self):
        self.login(self.manager)
        response = self.client.get(reverse('statistics_period'))
        today = timezone.localdate()
        self.assertEqual(response.context['start_date'], today.replace(day=1))
        self.assertEqual(response.context['end_date'], today)
        self.assertEqual(response.context['case_stats']['total_cases'], 2)

    def test_period_with_explicit_range(self):
        Consultation.objects.create(client=self.jane, lawyer=self.lawyer, start_time=at(10), topic='Lease', is_paid=True)
        Consultation.objects.create(client=self.john, start_time=at(10, day=20), topic='Audit')
        self.login(self.admin)
        response = self.client.get(reverse('statistics_period'), {'start_date': '2030-05-01', 'end_date': '2030-05-10'})
        stats = response.context['consultation_stats']
        self.assertEqual(stats['total_consultations'], 1)
        self.assertEqual(stats['paid_consultations'], 1)
        self.assertEqual(response.context['case_stats']['total_cases'], 0)

    def test_period_end_day_is_included(self):
        Consultation.objects.create(client=self.jane, start_time=at(23, 30, day=10), topic='Late call')
        self.login(self.admin)
        response = self.client.get(reverse('statistics_period'), {'start_date': '2030-05-10', 'end_date': '2030-05-10'})
        self.assertEqual(response.context['consultation_stats']['total_consultations'], 1)

    def test_period_start_after_end(self):
        self.login(self.admin)
        response = self.client.get(reverse('statistics_period'), {'start_date': '2030-05-10', 'end_date': '2030-05-01'})
        self.assertContains(response, 'The start date must not be after the end date.')
        self.assertNotIn('case_stats', response.context)

    def test_lawyer_cannot_open_period_statistics(self):
        self.login(self.lawyer)
        self.assertRedirects(self.client.get(reverse('statistics_period')), reverse('dashboard'))


class DocumentListTest(ViewTestCase):
    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.lease = Document.objects.create(
            case=cls.jane_case, title='Lease contract', document_type='CONTRACT', file='docs/lease.txt',
        )
        cls.tax_return = Document.objects.create(
            case=cls.john_case, title='Tax return', document_type='LETTER', is_important=True,
            file='docs/return.txt',
        )

    def test_lawyer_sees_documents_of_assigned_cases(self):
        self.login(self.lawyer)
        response = self.client.get(reverse('document_list'))
        self.assertEqual(list(response.context['documents']), [self.lease])
        self.assertNotContains(response, 'Tax return')

    def test_manager_filters_by_type_and_importance(self):
        self.login(self.manager)
        response = self.client.get(reverse('document_list'), {'document_type': 'LETTER'})
        self.assertEqual(list(response.context['documents']), [self.tax_return])
        response = self.client.get(reverse('document_list'), {'important': '1'})
        self.assertEqual(list(response.context['documents']), [self.tax_return])

    def test_filter_by_status(self):
        Document.objects.filter(pk=self.lease.pk).update(status='APPROVED')
        self.login(self.admin)
        response = self.client.get(reverse('document_list'), {'status': 'APPROVED'})
        self.assertEqual(list(response.context['documents']), [self.lease])
        # unknown codes are ignored
        response = self.client.get(reverse('document_list'), {'status': 'SHREDDED'})
        self.assertEqual(len(response.context['documents']), 2)

    def test_client_cannot_open_document_list(self):
        self.login(self.client_user)
        self.assertRedirects(self.client.get(reverse('document_list')), reverse('dashboard'))


class UserManagementTest(ViewTestCase):
    def test_admin_edits_account(self):
        self.login(self.admin)
        response = self.client.post(reverse('user_update', args=[self.manager.pk]), {
            'first_name': 'Max',
            'last_name': 'Power',
            'email': 'max@example.com',
            'phone': '',
            'role': User.ROLE_LAWYER,
            'is_active': 'on',
        })
        self.assertRedirects(response, reverse('user_detail', args=[self.manager.pk]))
        self.manager.refresh_from_db()
        self.assertEqual(self.manager.last_name, 'Power')
        # the role only changes through its own action
        self.assertEqual(self.manager.role, User.ROLE_MANAGER)

    def test_admin_promotes_lawyer(self):
        self.login(self.admin)
        response = self.client.post(reverse('user_change_role', args=[self.manager.pk]), {'role': User.ROLE_LAWYER})
        self.assertRedirects(response, reverse('user_detail', args=[self.manager.pk]))
        self.manager.refresh_from_db()
        self.assertEqual(self.manager.role, User.ROLE_LAWYER)
        self.assertTrue(hasattr(self.manager, 'lawyer_profile'))

    def test_unknown_role_rejected(self):
        self.login(self.admin)
        response = self.client.post(reverse('user_change_role', args=[self.manager.pk]), {'role': 'JUDGE'}, follow=True)
        self.assertContains(response, 'Unknown role')
        self.manager.refresh_from_db()
        self.assertEqual(self.manager.role, User.ROLE_MANAGER)
        response = self.client.post(reverse('user_change_role', args=[999999]), {'role': User.ROLE_LAWYER})
        self.assertEqual(response.status_code, 404)

    def test_search_users(self):
        self.login(self.admin)
        response = self.client.get(reverse('user_list'), {'q': 'counsel'})
        self.assertEqual(list(response.context['users']), [self.lawyer])
        response = self.client.get(reverse('user_list'), {'role': User.ROLE_MANAGER})
        self.assertEqual(list(response.context['users']), [self.manager])

    def test_user_detail_lists_assignments(self):
        Consultation.objects.create(client=self.john, lawyer=self.lawyer, start_time=at(10), topic='Audit prep')
        self.login(self.admin)
        response = self.client.get(reverse('user_detail', args=[self.lawyer.pk]))
        self.assertContains(response, 'Lease dispute')
        self.assertContains(response, 'John Doe')
        self.assertEqual(self.client.get(reverse('user_detail', args=[999999])).status_code, 404)

    def test_admin_cannot_deactivate_self(self):
        self.login(self.admin)
        self.client.post(reverse('user_toggle_active', args=[self.admin.pk]))
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.is_active)

    def test_admin_activates_registration(self):
        pending = User.objects.create_user(username='pending', password=PASSWORD, is_active=False)
        self.login(self.admin)
        self.client.post(reverse('user_toggle_active', args=[pending.pk]))
        pending.refresh_from_db()
        self.assertTrue(pending.is_active)
