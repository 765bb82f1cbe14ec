import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('students', '0001_initial'),
        ('fees', '0001_initial'),
        ('payments', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='WalletEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount_delta', models.DecimalField(decimal_places=2, help_text='Positive for credits, negative for debits', max_digits=12)),
                ('balance_after', models.DecimalField(decimal_places=2, max_digits=12)),
                ('reason', models.CharField(choices=[('OVERPAYMENT', 'Overpayment'), ('FEE_REDUCED', 'Fee Reduced'), ('STRUCTURE_DELETED', 'Structure Deleted'), ('UNASSIGNED', 'Fee Unassigned'), ('AUTO_APPLIED', 'Auto-applied to Fee')], db_index=True, max_length=50)),
                ('note', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('fee_transaction', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='wallet_entries', to='payments.feetransaction')),
                ('student_fee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='wallet_entries', to='fees.studentfee')),
                ('student_profile', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='wallet_entries', to='students.studentprofile')),
            ],
            options={
                'verbose_name': 'Wallet Entry',
                'verbose_name_plural': 'Wallet Entries',
                'db_table': 'wallet_entries',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['student_profile', 'created_at'], name='wallet_ent_student_created_idx')],
            },
        ),
    ]
